"""Translation between user-facing order specifications and on-chain obligation orders."""

from .common import (
    ExecutionBonusBpsRange,
    FullRepay,
    OrderAction,
    OrderContext,
    OrderSpecification,
    OrderType,
    PartialRepay,
)
from .family import OrderFamily
from .ltv_based import (
    LtvBasedOrderFamily,
    LtvBasedOrderSpecification,
    LtvBasedOrderTrigger,
    StopLoss,
    TakeProfit,
    create_ltv_based_order,
    read_ltv_based_order,
)
from .price_based import (
    LongStopLoss,
    LongTakeProfit,
    PriceBasedOrderContext,
    PriceBasedOrderFamily,
    PriceBasedOrderSpecification,
    PriceBasedOrderTrigger,
    ShortStopLoss,
    ShortTakeProfit,
    create_price_based_order_for_usd_position,
    read_price_based_order_for_usd_position,
    resolve_position_type,
)

__all__ = [
    "ExecutionBonusBpsRange",
    "FullRepay",
    "OrderAction",
    "OrderContext",
    "OrderSpecification",
    "OrderType",
    "PartialRepay",
    "OrderFamily",
    "LtvBasedOrderFamily",
    "LtvBasedOrderSpecification",
    "LtvBasedOrderTrigger",
    "StopLoss",
    "TakeProfit",
    "create_ltv_based_order",
    "read_ltv_based_order",
    "LongStopLoss",
    "LongTakeProfit",
    "PriceBasedOrderContext",
    "PriceBasedOrderFamily",
    "PriceBasedOrderSpecification",
    "PriceBasedOrderTrigger",
    "ShortStopLoss",
    "ShortTakeProfit",
    "create_price_based_order_for_usd_position",
    "read_price_based_order_for_usd_position",
    "resolve_position_type",
]
