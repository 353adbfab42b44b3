"""Configuration loading utilities for YAML-based SDK settings."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

_DEFAULT_STABLECOIN_SYMBOLS = ["USDC", "USDT", "PYUSD"]
_DEFAULT_EXECUTION_BONUS_BPS = (50, 200)


@dataclass(frozen=True)
class OrderSettings:
    """SDK settings loaded from YAML configuration file."""

    app_name: str
    debug: bool
    log_level: str
    stablecoin_symbols: list[str]
    stablecoin_mints: list[str]
    default_execution_bonus_bps: Tuple[int, int]


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_list(value: Any) -> list[str]:
    """Convert list-like or comma-separated value to list[str]."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _to_bps_range(value: Any, default: Tuple[int, int]) -> Tuple[int, int]:
    """Convert a two-element list (or ``"min,max"`` string) into a bps range."""
    items = _to_list(value)
    if len(items) != 2:
        logger.warning("Invalid bps range '%s'. Using default=%s", value, default)
        return default
    min_bps = _to_int(items[0], default[0])
    max_bps = _to_int(items[1], default[1])
    return min_bps, max_bps


def _read_config(path: Path) -> dict:
    """Read and parse YAML configuration."""
    try:
        with path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", path)
        return {}
    except yaml.YAMLError:
        logger.exception("Failed to parse config file from %s", path)
        return {}


def load_settings(path: Optional[str] = None) -> OrderSettings:
    """Load and validate SDK settings from ``config.yml`` (or the given path)."""
    config_path = Path(path).resolve() if path else _CONFIG_PATH
    config = _read_config(config_path)
    app_cfg = config.get("app") or {}
    orders_cfg = config.get("orders") or {}

    app_name = str(app_cfg.get("name", "Lending Orders SDK"))
    debug = _to_bool(app_cfg.get("debug", False), False)
    log_level = str(app_cfg.get("log_level", "DEBUG" if debug else "INFO")).upper()

    stablecoin_symbols = _to_list(orders_cfg.get("stablecoin_symbols", _DEFAULT_STABLECOIN_SYMBOLS))
    stablecoin_mints = _to_list(orders_cfg.get("stablecoin_mints", []))
    default_execution_bonus_bps = _to_bps_range(
        orders_cfg.get("default_execution_bonus_bps", list(_DEFAULT_EXECUTION_BONUS_BPS)),
        _DEFAULT_EXECUTION_BONUS_BPS,
    )

    return OrderSettings(
        app_name=app_name,
        debug=debug,
        log_level=log_level,
        stablecoin_symbols=stablecoin_symbols,
        stablecoin_mints=stablecoin_mints,
        default_execution_bonus_bps=default_execution_bonus_bps,
    )
