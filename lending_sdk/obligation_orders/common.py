"""Types shared by the LTV-based and price-based obligation order families."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal, Tuple, Union

from pydantic import Field

from lending_sdk.models.base import FrozenModel
from lending_sdk.models.enums import OrderActionType, OrderType
from lending_sdk.models.market import MarketModel
from lending_sdk.models.obligation import ObligationModel

__all__ = [
    "ExecutionBonusBpsRange",
    "FullRepay",
    "OrderAction",
    "OrderContext",
    "OrderSpecification",
    "OrderType",
    "PartialRepay",
]

ExecutionBonusBpsRange = Tuple[Decimal, Decimal]


@dataclass(frozen=True)
class OrderContext:
    """The market and obligation snapshots an order is translated against.

    Owned by the caller and only read during a single translation call.
    """

    market: MarketModel
    obligation: ObligationModel


class FullRepay(FrozenModel):
    """Repay all of the obligation's debt."""

    type: Literal[OrderActionType.FULL_REPAY] = OrderActionType.FULL_REPAY


class PartialRepay(FrozenModel):
    """Repay the given amount (in lamports) of the obligation's single debt."""

    type: Literal[OrderActionType.PARTIAL_REPAY] = OrderActionType.PARTIAL_REPAY
    repay_debt_amount_lamports: Decimal


OrderAction = Union[FullRepay, PartialRepay]


class OrderSpecification(FrozenModel):
    """A high-level specification of a stop-loss or take-profit order.

    Each order family narrows ``trigger`` to its own trigger types.

    ``execution_bonus_bps_range`` is the ``(min, max)`` bonus offered to the
    executor, e.g. ``(50, 200)`` meaning 0.5% up to 2%.
    """

    trigger: Any
    action: OrderAction = Field(..., discriminator="type")
    execution_bonus_bps_range: ExecutionBonusBpsRange
