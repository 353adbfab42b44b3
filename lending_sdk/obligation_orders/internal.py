"""Translation helpers shared by the obligation order families.

Exported for use within ``lending_sdk.obligation_orders`` only.
"""

from decimal import Decimal
from typing import Tuple, Type, TypeVar

from lending_sdk.common.protocol_constants import (
    MAX_EXECUTION_BONUS_BPS,
    bps_to_rate,
    decimal_to_scaled_fraction,
    rate_to_bps,
    round_nearest,
)
from lending_sdk.common.validations import check_that, get_single_element
from lending_sdk.models.enums import OrderType
from lending_sdk.models.exceptions import (
    ImmediatelyTriggeredOrderError,
    OrderCompatibilityError,
    OrderRangeError,
)
from lending_sdk.models.obligation_order import (
    DeleverageAllDebt,
    DeleverageDebtAmount,
    ObligationOrder,
    OrderCondition,
    OrderOpportunity,
)

from .common import ExecutionBonusBpsRange, FullRepay, OrderAction, OrderContext, OrderSpecification, PartialRepay


TriggerT = TypeVar("TriggerT")

_ORDER_INDICES = {
    OrderType.STOP_LOSS: 0,
    OrderType.TAKE_PROFIT: 1,
}


def to_order_index(order_type: OrderType) -> int:
    """Return the obligation slot reserved for the given order type."""
    return _ORDER_INDICES[OrderType(order_type)]


def create_condition_based_order(
    context: OrderContext,
    condition: OrderCondition,
    specification: OrderSpecification,
) -> ObligationOrder:
    """Build an order from an already-resolved condition and the rest of the specification.

    Raises:
        OrderRangeError: If the threshold cannot be stored on-chain, or the repay amount or the bonus range is invalid.
        ImmediatelyTriggeredOrderError: If the condition is already met by the obligation.
        ObligationShapeError: If a partial repay is requested on a multi-borrow obligation.
    """
    check_encodable_threshold(condition)
    check_that(
        condition.evaluate(context.obligation) is None,
        "cannot create an immediately-triggered order",
        ImmediatelyTriggeredOrderError,
    )
    opportunity = to_order_opportunity(context, specification.action)
    min_execution_bonus_rate, max_execution_bonus_rate = to_execution_bonus_rates(
        specification.execution_bonus_bps_range
    )
    return ObligationOrder(
        condition=condition,
        opportunity=opportunity,
        min_execution_bonus_rate=min_execution_bonus_rate,
        max_execution_bonus_rate=max_execution_bonus_rate,
    )


def check_encodable_threshold(condition: OrderCondition) -> None:
    """Ensure the threshold survives the on-chain scaled-fraction encoding as a non-zero value.

    Raises:
        OrderRangeError: If the threshold is above ``FRACTION_MAX`` or rounds to zero.
    """
    threshold = condition.threshold()
    try:
        threshold_sf = decimal_to_scaled_fraction(threshold)
    except ValueError as exc:
        raise OrderRangeError("trigger threshold cannot be stored on-chain: {0}".format(exc))
    check_that(
        threshold_sf > 0,
        "trigger threshold {0} is too small to be stored on-chain".format(threshold),
        OrderRangeError,
    )


def read_trigger_based_order(
    order: ObligationOrder,
    trigger: TriggerT,
    specification_type: Type[OrderSpecification] = OrderSpecification,
) -> OrderSpecification:
    """Recover the specification of a stored order whose trigger was already decoded."""
    return specification_type(
        trigger=trigger,
        action=to_action(order.opportunity),
        execution_bonus_bps_range=to_execution_bonus_bps(
            order.min_execution_bonus_rate, order.max_execution_bonus_rate
        ),
    )


def to_order_opportunity(context: OrderContext, action: OrderAction) -> OrderOpportunity:
    """Convert a user-facing action into the on-chain opportunity."""
    if isinstance(action, FullRepay):
        return DeleverageAllDebt()
    if isinstance(action, PartialRepay):
        repay_amount = action.repay_debt_amount_lamports
        check_that(repay_amount > 0, "repay amount must be positive; got {0}".format(repay_amount), OrderRangeError)
        available_debt_amount = get_single_element(context.obligation.get_borrows(), "borrow").amount
        check_that(
            repay_amount <= available_debt_amount,
            "partial repay amount {0} cannot exceed the borrowed amount {1}".format(
                repay_amount, available_debt_amount
            ),
            OrderRangeError,
        )
        return DeleverageDebtAmount(repay_amount)
    raise OrderCompatibilityError("unsupported order action {0}".format(type(action).__name__))


def to_execution_bonus_rates(execution_bonus_bps_range: ExecutionBonusBpsRange) -> Tuple[Decimal, Decimal]:
    """Convert a ``(min, max)`` bps range into validated fractions."""
    min_bps, max_bps = execution_bonus_bps_range
    min_execution_bonus_rate = bps_to_rate(min_bps)
    max_execution_bonus_rate = bps_to_rate(max_bps)
    check_that(
        min_execution_bonus_rate >= 0,
        "execution bonus rate cannot be negative: {0}".format(min_execution_bonus_rate),
        OrderRangeError,
    )
    check_that(
        max_execution_bonus_rate >= min_execution_bonus_rate,
        "max execution bonus rate {0} cannot be lower than min {1}".format(
            max_execution_bonus_rate, min_execution_bonus_rate
        ),
        OrderRangeError,
    )
    max_execution_bonus_bps = round_nearest(rate_to_bps(max_execution_bonus_rate))
    check_that(
        max_execution_bonus_bps <= MAX_EXECUTION_BONUS_BPS,
        "max execution bonus {0} bps exceeds the on-chain limit of {1} bps".format(
            max_execution_bonus_bps, MAX_EXECUTION_BONUS_BPS
        ),
        OrderRangeError,
    )
    return min_execution_bonus_rate, max_execution_bonus_rate


def to_action(opportunity: OrderOpportunity) -> OrderAction:
    """Convert a stored on-chain opportunity back into a user-facing action."""
    if isinstance(opportunity, DeleverageAllDebt):
        return FullRepay()
    if isinstance(opportunity, DeleverageDebtAmount):
        return PartialRepay(repay_debt_amount_lamports=opportunity.amount)
    raise OrderCompatibilityError("incompatible on-chain opportunity {0}".format(type(opportunity).__name__))


def to_execution_bonus_bps(
    min_execution_bonus_rate: Decimal,
    max_execution_bonus_rate: Decimal,
) -> ExecutionBonusBpsRange:
    """Convert stored bonus fractions back into a bps range."""
    return rate_to_bps(min_execution_bonus_rate), rate_to_bps(max_execution_bonus_rate)


def trigger_type_name(trigger: object) -> str:
    """Name a trigger by its discriminator for error messages."""
    trigger_type = getattr(trigger, "type", None)
    if trigger_type is None:
        return type(trigger).__name__
    return str(getattr(trigger_type, "value", trigger_type))
