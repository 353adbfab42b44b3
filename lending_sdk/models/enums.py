"""Reusable enums for obligation order models."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""

    def __str__(self) -> str:
        return self.value


class OrderType(StringEnum):
    """The two order slots available on every obligation."""

    STOP_LOSS = "StopLoss"
    TAKE_PROFIT = "TakeProfit"


class OrderActionType(StringEnum):
    """What an executed order does to the obligation's debt."""

    FULL_REPAY = "FullRepay"
    PARTIAL_REPAY = "PartialRepay"


class LtvBasedOrderTriggerType(StringEnum):
    """Discriminator of LTV-based triggers."""

    STOP_LOSS = "StopLoss"
    TAKE_PROFIT = "TakeProfit"


class PriceBasedOrderTriggerType(StringEnum):
    """Discriminator of price-based triggers."""

    LONG_STOP_LOSS = "LongStopLoss"
    LONG_TAKE_PROFIT = "LongTakeProfit"
    SHORT_STOP_LOSS = "ShortStopLoss"
    SHORT_TAKE_PROFIT = "ShortTakeProfit"


class PositionType(StringEnum):
    """Economic direction of a single-collateral, single-debt obligation."""

    LONG = "Long"
    SHORT = "Short"
