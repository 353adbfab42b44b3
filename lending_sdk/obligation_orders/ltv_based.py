"""LTV-based stop-loss and take-profit orders."""

from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import Field

from lending_sdk.common.protocol_constants import pct_to_rate, rate_to_pct
from lending_sdk.common.validations import check_that
from lending_sdk.models.base import FrozenModel
from lending_sdk.models.enums import LtvBasedOrderTriggerType, OrderType
from lending_sdk.models.exceptions import OrderCompatibilityError, OrderRangeError
from lending_sdk.models.obligation_order import ObligationOrderAtIndex, OrderCondition, UserLtvAbove, UserLtvBelow

from .common import OrderContext, OrderSpecification
from .family import OrderFamily
from .internal import trigger_type_name


MIN_LTV_THRESHOLD = Decimal("0.01")
MAX_LTV_THRESHOLD = Decimal("0.99")


class StopLoss(FrozenModel):
    """A trigger for a stop-loss on LTV."""

    type: Literal[LtvBasedOrderTriggerType.STOP_LOSS] = LtvBasedOrderTriggerType.STOP_LOSS
    when_ltv_pct_above: Decimal


class TakeProfit(FrozenModel):
    """A trigger for a take-profit on LTV."""

    type: Literal[LtvBasedOrderTriggerType.TAKE_PROFIT] = LtvBasedOrderTriggerType.TAKE_PROFIT
    when_ltv_pct_below: Decimal


LtvBasedOrderTrigger = Union[StopLoss, TakeProfit]


class LtvBasedOrderSpecification(OrderSpecification):
    """A high-level specification of an LTV-based order."""

    trigger: LtvBasedOrderTrigger = Field(..., discriminator="type")


class LtvBasedOrderFamily(OrderFamily[OrderContext, LtvBasedOrderTrigger, None]):
    """Orders triggered by the obligation's LTV crossing a percentage."""

    name = "LTV-based"
    specification_type = LtvBasedOrderSpecification

    def resolve_profile(self, context: OrderContext) -> None:
        """Refuse obligations using a 0-LTV collateral.

        Such collateral counts in the on-chain LTV denominator while a UI-facing
        LTV percentage leaves it out, so the trigger would not mean what the
        user sees.
        """
        for deposit_reserve_address in context.obligation.deposits:
            deposit_reserve = context.market.get_existing_reserve_by_address(deposit_reserve_address)
            check_that(
                deposit_reserve.loan_to_value_pct != 0,
                "LTV-based orders cannot be used with a 0-LTV collateral: {0}".format(deposit_reserve.symbol),
                OrderCompatibilityError,
            )
        return None

    def to_condition(self, profile: None, order_type: OrderType, trigger: LtvBasedOrderTrigger) -> OrderCondition:
        if order_type == OrderType.STOP_LOSS and isinstance(trigger, StopLoss):
            return UserLtvAbove(pct_to_rate(trigger.when_ltv_pct_above))
        if order_type == OrderType.TAKE_PROFIT and isinstance(trigger, TakeProfit):
            return UserLtvBelow(pct_to_rate(trigger.when_ltv_pct_below))
        raise OrderCompatibilityError(
            "an LTV-based {0} order cannot use {1} condition".format(
                OrderType(order_type).value, trigger_type_name(trigger)
            )
        )

    def validate_condition(self, condition: OrderCondition) -> None:
        threshold = condition.threshold()
        check_that(
            MIN_LTV_THRESHOLD <= threshold <= MAX_LTV_THRESHOLD,
            "LTV-based trigger outside valid range [{0}%; {1}%]: {2}%".format(
                rate_to_pct(MIN_LTV_THRESHOLD).normalize(),
                rate_to_pct(MAX_LTV_THRESHOLD).normalize(),
                rate_to_pct(threshold),
            ),
            OrderRangeError,
        )

    def to_trigger(self, profile: None, order_type: OrderType, condition: OrderCondition) -> LtvBasedOrderTrigger:
        if order_type == OrderType.STOP_LOSS and isinstance(condition, UserLtvAbove):
            return StopLoss(when_ltv_pct_above=rate_to_pct(condition.min_user_ltv_exclusive))
        if order_type == OrderType.TAKE_PROFIT and isinstance(condition, UserLtvBelow):
            return TakeProfit(when_ltv_pct_below=rate_to_pct(condition.max_user_ltv_exclusive))
        raise OrderCompatibilityError(
            "an LTV-based {0} order has an incompatible on-chain condition {1}".format(
                OrderType(order_type).value, type(condition).__name__
            )
        )


_LTV_BASED_ORDERS = LtvBasedOrderFamily()


def create_ltv_based_order(
    context: OrderContext,
    order_type: OrderType,
    specification: Optional[LtvBasedOrderSpecification],
) -> ObligationOrderAtIndex:
    """Creates an LTV-based order slot update from a stop-loss or take-profit specification.

    The result can be passed directly to the "set obligation order" instruction
    builder, which replaces (or cancels, if the specification is ``None``) the
    obligation's stop-loss or take-profit order on-chain.

    The obligation cannot use 0-LTV collaterals.

    Raises:
        OrderCompatibilityError: On a 0-LTV collateral or a trigger not matching ``order_type``.
        OrderRangeError: If the LTV threshold is outside ``[1%; 99%]`` or the action/bonus is invalid.
        ImmediatelyTriggeredOrderError: If the obligation already meets the condition.
    """
    return _LTV_BASED_ORDERS.create_order(context, order_type, specification)


def read_ltv_based_order(context: OrderContext, order_type: OrderType) -> Optional[LtvBasedOrderSpecification]:
    """Parses the specification of the obligation's stop-loss or take-profit order.

    The stored order is expected to be of matching type, i.e. as if it was
    created by :func:`create_ltv_based_order`. Returns ``None`` for an empty slot.
    """
    return _LTV_BASED_ORDERS.read_order(context, order_type)

