"""Obligation order translation for a lending protocol client SDK."""

# Models first: the shared validation helpers depend on the model exceptions.
from .models import (
    Address,
    ImmediatelyTriggeredOrderError,
    MarketModel,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    ObligationModel,
    ObligationOrder,
    ObligationOrderAtIndex,
    ObligationShapeError,
    OrderCompatibilityError,
    OrderPreconditionError,
    OrderRangeError,
    PositionClassificationError,
    PositionModel,
    PositionType,
    ReserveModel,
)
from .obligation_orders import (
    FullRepay,
    LongStopLoss,
    LongTakeProfit,
    LtvBasedOrderSpecification,
    OrderContext,
    OrderType,
    PartialRepay,
    PriceBasedOrderContext,
    PriceBasedOrderSpecification,
    ShortStopLoss,
    ShortTakeProfit,
    StopLoss,
    TakeProfit,
    create_ltv_based_order,
    create_price_based_order_for_usd_position,
    read_ltv_based_order,
    read_price_based_order_for_usd_position,
    resolve_position_type,
)

__all__ = [
    "Address",
    "MarketModel",
    "ObligationModel",
    "ObligationOrder",
    "ObligationOrderAtIndex",
    "PositionModel",
    "PositionType",
    "ReserveModel",
    "ModelError",
    "ModelNotFoundError",
    "ModelValidationError",
    "OrderPreconditionError",
    "ObligationShapeError",
    "OrderRangeError",
    "PositionClassificationError",
    "OrderCompatibilityError",
    "ImmediatelyTriggeredOrderError",
    "FullRepay",
    "PartialRepay",
    "OrderContext",
    "OrderType",
    "PriceBasedOrderContext",
    "LtvBasedOrderSpecification",
    "PriceBasedOrderSpecification",
    "StopLoss",
    "TakeProfit",
    "LongStopLoss",
    "LongTakeProfit",
    "ShortStopLoss",
    "ShortTakeProfit",
    "create_ltv_based_order",
    "read_ltv_based_order",
    "create_price_based_order_for_usd_position",
    "read_price_based_order_for_usd_position",
    "resolve_position_type",
]
