"""Core utilities for configuration and logging."""

from .config import OrderSettings, load_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "OrderSettings",
    "load_settings",
    "get_logger",
    "setup_logging",
]
