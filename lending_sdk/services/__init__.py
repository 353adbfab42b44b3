"""Service layer exports."""

from .obligation_order_service import ObligationOrderService

__all__ = [
    "ObligationOrderService",
]
