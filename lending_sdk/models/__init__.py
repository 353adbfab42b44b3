"""Public model package exports for the lending orders SDK."""

from .base import Address, FrozenModel
from .enums import (
    LtvBasedOrderTriggerType,
    OrderActionType,
    OrderType,
    PositionType,
    PriceBasedOrderTriggerType,
)
from .exceptions import (
    ImmediatelyTriggeredOrderError,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    ObligationShapeError,
    OrderCompatibilityError,
    OrderPreconditionError,
    OrderRangeError,
    PositionClassificationError,
)
from .market import MarketModel
from .obligation import ObligationModel, ObligationStats, PositionModel
from .obligation_order import (
    AvailableOrderExecution,
    ConditionHit,
    DebtCollPriceRatioAbove,
    DebtCollPriceRatioBelow,
    DeleverageAllDebt,
    DeleverageDebtAmount,
    ObligationOrder,
    ObligationOrderAtIndex,
    ObligationOrderState,
    OrderCondition,
    OrderOpportunity,
    TokenAmount,
    UserLtvAbove,
    UserLtvBelow,
)
from .reserves import ReserveModel

__all__ = [
    "Address",
    "FrozenModel",
    "LtvBasedOrderTriggerType",
    "OrderActionType",
    "OrderType",
    "PositionType",
    "PriceBasedOrderTriggerType",
    "ModelError",
    "ModelValidationError",
    "ModelNotFoundError",
    "OrderPreconditionError",
    "ObligationShapeError",
    "OrderRangeError",
    "PositionClassificationError",
    "OrderCompatibilityError",
    "ImmediatelyTriggeredOrderError",
    "ReserveModel",
    "MarketModel",
    "PositionModel",
    "ObligationStats",
    "ObligationModel",
    "OrderCondition",
    "OrderOpportunity",
    "UserLtvAbove",
    "UserLtvBelow",
    "DebtCollPriceRatioAbove",
    "DebtCollPriceRatioBelow",
    "DeleverageDebtAmount",
    "DeleverageAllDebt",
    "ObligationOrder",
    "ObligationOrderAtIndex",
    "ObligationOrderState",
    "ConditionHit",
    "TokenAmount",
    "AvailableOrderExecution",
]
