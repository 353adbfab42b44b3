"""On-chain obligation order representation: conditions, opportunities and order slots.

An obligation carries two order slots. Each slot is either empty or holds an
order made of a condition (when the order becomes executable), an opportunity
(what a liquidator may repay) and a min/max execution bonus range.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Type

from pydantic import Field

from lending_sdk.common.protocol_constants import (
    FRACTION_MAX,
    MAX_EXECUTION_BONUS_BPS,
    bps_to_rate,
    decimal_to_scaled_fraction,
    rate_to_bps,
    round_nearest,
    scaled_fraction_to_decimal,
)
from lending_sdk.common.validations import get_single_element

from .base import FrozenModel
from .exceptions import ModelValidationError, OrderCompatibilityError

if TYPE_CHECKING:
    from .market import MarketModel
    from .obligation import ObligationModel, PositionModel


@dataclass(frozen=True)
class ConditionHit:
    """Numeric details on why an order's condition was met.

    ``normalized_distance_from_threshold`` is a ``[0; 1]`` measure of how hard
    the threshold is crossed: ``0`` exactly at the threshold, ``1`` at the most
    extreme value (e.g. the liquidation LTV for an LTV-based stop-loss).
    """

    normalized_distance_from_threshold: Decimal


@dataclass(frozen=True)
class TokenAmount:
    """An amount of lamports of a given token mint."""

    mint: str
    amount: Decimal


@dataclass(frozen=True)
class AvailableOrderExecution:
    """A potential exchange of tokens resulting from order execution.

    ``withdraw`` already includes the execution bonus, but not the protocol fee.
    """

    repay: TokenAmount
    withdraw: TokenAmount
    bonus_rate: Decimal


class OrderCondition(ABC):
    """A condition "activating" an order for liquidators."""

    @abstractmethod
    def threshold(self) -> Decimal:
        """An abstract parameter of the condition, meaningful in context of the condition's type."""

    @abstractmethod
    def evaluate(self, obligation: "ObligationModel") -> Optional[ConditionHit]:
        """Returns a potential hit on this condition, or ``None`` when it is not met."""


class OrderOpportunity(ABC):
    """The type and size of a repayment made available by an order."""

    @abstractmethod
    def parameter(self) -> Decimal:
        """An abstract parameter of the opportunity, meaningful in context of its type."""

    @abstractmethod
    def get_max_repay(self, borrows: Sequence["PositionModel"]) -> TokenAmount:
        """Returns the highest-valued amount that can be repaid among the given borrows."""


@dataclass(frozen=True)
class UserLtvAbove(OrderCondition):
    """Met when the obligation's LTV is strictly higher than the threshold."""

    min_user_ltv_exclusive: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_user_ltv_exclusive", Decimal(self.min_user_ltv_exclusive))

    def threshold(self) -> Decimal:
        return self.min_user_ltv_exclusive

    def evaluate(self, obligation: "ObligationModel") -> Optional[ConditionHit]:
        # The on-chain LTV definition divides by all deposits (0-LTV ones included).
        return _evaluate_stop_loss(
            obligation.loan_to_value(), self.min_user_ltv_exclusive, obligation.liquidation_ltv()
        )


@dataclass(frozen=True)
class UserLtvBelow(OrderCondition):
    """Met when the obligation's LTV is strictly lower than the threshold."""

    max_user_ltv_exclusive: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_user_ltv_exclusive", Decimal(self.max_user_ltv_exclusive))

    def threshold(self) -> Decimal:
        return self.max_user_ltv_exclusive

    def evaluate(self, obligation: "ObligationModel") -> Optional[ConditionHit]:
        return _evaluate_take_profit(obligation.loan_to_value(), self.max_user_ltv_exclusive)


@dataclass(frozen=True)
class DebtCollPriceRatioAbove(OrderCondition):
    """Met when the debt token's price expressed in the collateral token is strictly higher than the threshold.

    May only be applied to single-collateral, single-debt obligations.
    """

    min_debt_coll_price_ratio_exclusive: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "min_debt_coll_price_ratio_exclusive", Decimal(self.min_debt_coll_price_ratio_exclusive)
        )

    def threshold(self) -> Decimal:
        return self.min_debt_coll_price_ratio_exclusive

    def evaluate(self, obligation: "ObligationModel") -> Optional[ConditionHit]:
        price_ratio = _calculate_debt_coll_price_ratio(obligation)
        stats = obligation.refreshed_stats
        # For single-debt-single-coll obligations the price ratio is proportional to LTV, so the
        # "liquidation price ratio" is the current one scaled by unhealthy/current borrow value.
        liquidation_price_ratio = (
            price_ratio * stats.borrow_liquidation_limit / stats.user_total_borrow_borrow_factor_adjusted
        )
        return _evaluate_stop_loss(price_ratio, self.min_debt_coll_price_ratio_exclusive, liquidation_price_ratio)


@dataclass(frozen=True)
class DebtCollPriceRatioBelow(OrderCondition):
    """Met when the debt token's price expressed in the collateral token is strictly lower than the threshold.

    May only be applied to single-collateral, single-debt obligations.
    """

    max_debt_coll_price_ratio_exclusive: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "max_debt_coll_price_ratio_exclusive", Decimal(self.max_debt_coll_price_ratio_exclusive)
        )

    def threshold(self) -> Decimal:
        return self.max_debt_coll_price_ratio_exclusive

    def evaluate(self, obligation: "ObligationModel") -> Optional[ConditionHit]:
        return _evaluate_take_profit(
            _calculate_debt_coll_price_ratio(obligation), self.max_debt_coll_price_ratio_exclusive
        )


@dataclass(frozen=True)
class DeleverageDebtAmount(OrderOpportunity):
    """Repay up to the given amount of the obligation's only debt token."""

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", Decimal(self.amount))

    def parameter(self) -> Decimal:
        return self.amount

    def get_max_repay(self, borrows: Sequence["PositionModel"]) -> TokenAmount:
        single_borrow = get_single_element(borrows, "borrow")
        return TokenAmount(mint=single_borrow.mint_address, amount=min(single_borrow.amount, self.amount))


@dataclass(frozen=True)
class DeleverageAllDebt(OrderOpportunity):
    """Repay all debt of the obligation (the highest-valued borrow first)."""

    fixed_parameter: Optional[Decimal] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.fixed_parameter is not None and Decimal(self.fixed_parameter) != FRACTION_MAX:
            raise ModelValidationError(
                "invalid DeleverageAllDebt parameter: {0} (if given, must be FRACTION_MAX = {1})".format(
                    self.fixed_parameter, FRACTION_MAX
                )
            )

    def parameter(self) -> Decimal:
        return FRACTION_MAX

    def get_max_repay(self, borrows: Sequence["PositionModel"]) -> TokenAmount:
        if not borrows:
            raise OrderCompatibilityError("opportunity type not valid on obligation with no borrows")
        highest_value_borrow = max(borrows, key=lambda borrow: borrow.market_value_refreshed)
        return TokenAmount(mint=highest_value_borrow.mint_address, amount=highest_value_borrow.amount)


# Condition type 0 ("never") is the empty slot, represented by `None` in the SDK.
_NULL_CONDITION_TYPE = 0

CONDITION_TO_TYPE_ID: Dict[Type[OrderCondition], int] = {
    UserLtvAbove: 1,
    UserLtvBelow: 2,
    DebtCollPriceRatioAbove: 3,
    DebtCollPriceRatioBelow: 4,
}

OPPORTUNITY_TO_TYPE_ID: Dict[Type[OrderOpportunity], int] = {
    DeleverageDebtAmount: 0,
    DeleverageAllDebt: 1,
}

TYPE_ID_TO_CONDITION = {type_id: condition_type for condition_type, type_id in CONDITION_TO_TYPE_ID.items()}
TYPE_ID_TO_OPPORTUNITY = {type_id: opportunity_type for opportunity_type, type_id in OPPORTUNITY_TO_TYPE_ID.items()}


class ObligationOrderState(FrozenModel):
    """The on-chain field layout of one order slot."""

    condition_type: int = Field(default=_NULL_CONDITION_TYPE, ge=0, le=255)
    condition_threshold_sf: int = Field(default=0, ge=0)
    opportunity_type: int = Field(default=0, ge=0, le=255)
    opportunity_parameter_sf: int = Field(default=0, ge=0)
    min_execution_bonus_bps: int = Field(default=0, ge=0, le=MAX_EXECUTION_BONUS_BPS)
    max_execution_bonus_bps: int = Field(default=0, ge=0, le=MAX_EXECUTION_BONUS_BPS)

    @property
    def is_null(self) -> bool:
        """Whether this slot holds no active order."""
        return self.condition_type == _NULL_CONDITION_TYPE


NULL_ORDER_STATE = ObligationOrderState()


@dataclass(frozen=True)
class ObligationOrder:
    """A business wrapper around the on-chain order state.

    ``min_execution_bonus_rate`` (e.g. ``0.01`` meaning 1%) is offered when the
    condition threshold has been barely crossed, ``max_execution_bonus_rate``
    when it has been exceeded by the maximum possible margin.
    """

    condition: OrderCondition
    opportunity: OrderOpportunity
    min_execution_bonus_rate: Decimal
    max_execution_bonus_rate: Optional[Decimal] = None

    def __post_init__(self) -> None:
        min_rate = Decimal(self.min_execution_bonus_rate)
        max_rate = min_rate if self.max_execution_bonus_rate is None else Decimal(self.max_execution_bonus_rate)
        object.__setattr__(self, "min_execution_bonus_rate", min_rate)
        object.__setattr__(self, "max_execution_bonus_rate", max_rate)

    @classmethod
    def from_state(cls, state: ObligationOrderState) -> Optional["ObligationOrder"]:
        """Constructs an instance based on the given on-chain data.

        Returns ``None`` if the input represents just an empty slot.

        Raises:
            ModelValidationError: If the state uses an unknown condition or opportunity type.
        """
        if state.is_null:
            return None
        condition_type = TYPE_ID_TO_CONDITION.get(state.condition_type)
        if condition_type is None:
            raise ModelValidationError("unknown condition type {0}".format(state.condition_type))
        opportunity_type = TYPE_ID_TO_OPPORTUNITY.get(state.opportunity_type)
        if opportunity_type is None:
            raise ModelValidationError("unknown opportunity type {0}".format(state.opportunity_type))
        condition = condition_type(scaled_fraction_to_decimal(state.condition_threshold_sf))
        opportunity = opportunity_type(scaled_fraction_to_decimal(state.opportunity_parameter_sf))
        return cls(
            condition=condition,
            opportunity=opportunity,
            min_execution_bonus_rate=bps_to_rate(state.min_execution_bonus_bps),
            max_execution_bonus_rate=bps_to_rate(state.max_execution_bonus_bps),
        )

    def to_state(self) -> ObligationOrderState:
        """Returns the on-chain state represented by this instance."""
        condition_type = CONDITION_TO_TYPE_ID.get(type(self.condition))
        if condition_type is None:
            raise ModelValidationError("unknown condition {0}".format(type(self.condition).__name__))
        opportunity_type = OPPORTUNITY_TO_TYPE_ID.get(type(self.opportunity))
        if opportunity_type is None:
            raise ModelValidationError("unknown opportunity {0}".format(type(self.opportunity).__name__))
        return ObligationOrderState(
            condition_type=condition_type,
            condition_threshold_sf=decimal_to_scaled_fraction(self.condition.threshold()),
            opportunity_type=opportunity_type,
            opportunity_parameter_sf=decimal_to_scaled_fraction(self.opportunity.parameter()),
            min_execution_bonus_bps=int(round_nearest(rate_to_bps(self.min_execution_bonus_rate))),
            max_execution_bonus_bps=int(round_nearest(rate_to_bps(self.max_execution_bonus_rate))),
        )

    def at_index(self, index: int) -> "ObligationOrderAtIndex":
        """Binds this order to the given slot."""
        return ObligationOrderAtIndex(index=index, order=self)

    def find_max_available_execution(
        self,
        market: "MarketModel",
        obligation: "ObligationModel",
    ) -> Optional[AvailableOrderExecution]:
        """Returns the highest-valued execution currently offered by this order.

        Returns ``None`` when the order's condition is not met.
        """
        condition_hit = self.condition.evaluate(obligation)
        if condition_hit is None:
            return None
        max_repay = self.opportunity.get_max_repay(obligation.get_borrows())
        repay_borrow = obligation.get_borrow_by_mint(max_repay.mint)
        if repay_borrow is None:
            raise OrderCompatibilityError("no borrow of mint {0} on obligation".format(max_repay.mint))
        max_repay_value = _token_amount_to_value(max_repay, repay_borrow)
        execution_bonus_rate = self._calculate_execution_bonus_rate(condition_hit, obligation)
        execution_bonus_factor = Decimal(1) + execution_bonus_rate
        max_withdraw_value = max_repay_value * execution_bonus_factor

        # Only the lowest-liquidation-LTV deposit may be withdrawn; 0-LTV assets are never liquidatable.
        liquidatable_deposits = []
        for deposit in obligation.get_deposits():
            _max_ltv, liquidation_ltv = obligation.get_ltv_for_reserve(market, deposit.reserve_address)
            if liquidation_ltv > 0:
                liquidatable_deposits.append((liquidation_ltv, deposit))
        if not liquidatable_deposits:
            raise OrderCompatibilityError("obligation {0} has no liquidatable deposits".format(obligation.address))
        min_liquidation_ltv = min(liquidation_ltv for liquidation_ltv, _deposit in liquidatable_deposits)

        candidates = [
            (min(deposit.market_value_refreshed, max_withdraw_value), deposit)
            for liquidation_ltv, deposit in liquidatable_deposits
            if liquidation_ltv == min_liquidation_ltv
        ]
        # Ties are broken by mint address for deterministic selection.
        actual_withdraw_value, withdraw_deposit = max(
            candidates, key=lambda candidate: (candidate[0], candidate[1].mint_address)
        )
        actual_repay_value = actual_withdraw_value / execution_bonus_factor
        return AvailableOrderExecution(
            repay=_value_to_token_amount(actual_repay_value, repay_borrow),
            withdraw=_value_to_token_amount(actual_withdraw_value, withdraw_deposit),
            bonus_rate=execution_bonus_rate,
        )

    def _calculate_execution_bonus_rate(self, condition_hit: ConditionHit, obligation: "ObligationModel") -> Decimal:
        """Interpolates the bonus within the configured range, capped so that execution improves LTV."""
        interpolated_bonus_rate = self.min_execution_bonus_rate + condition_hit.normalized_distance_from_threshold * (
            self.max_execution_bonus_rate - self.min_execution_bonus_rate
        )
        diff_to_bad_debt = Decimal(1) - obligation.no_bf_loan_to_value()
        return min(interpolated_bonus_rate, diff_to_bad_debt)


@dataclass(frozen=True)
class ObligationOrderAtIndex:
    """A single order slot of an obligation, which may contain an order or not.

    Passed to the "set obligation order" instruction builder to set or cancel an order.
    """

    index: int
    order: Optional[ObligationOrder] = None

    @classmethod
    def empty(cls, index: int) -> "ObligationOrderAtIndex":
        """Creates an empty slot representation (suitable for cancelling an order)."""
        return cls(index=index, order=None)

    def order_state(self) -> ObligationOrderState:
        """Returns the on-chain state of the slot (zeroed if the order is not set)."""
        if self.order is None:
            return NULL_ORDER_STATE
        return self.order.to_state()


def decode_order_states(states: Sequence[ObligationOrderState]) -> List[Optional[ObligationOrder]]:
    """Decodes every slot of an obligation, keeping ``None`` for empty ones."""
    return [ObligationOrder.from_state(state) for state in states]


def _token_amount_to_value(token_amount: TokenAmount, position: "PositionModel") -> Decimal:
    if token_amount.mint != position.mint_address:
        raise OrderCompatibilityError(
            "value of {0} cannot be computed using a position of mint {1}".format(token_amount, position.mint_address)
        )
    return token_amount.amount * position.market_value_refreshed / position.amount


def _value_to_token_amount(value: Decimal, position: "PositionModel") -> TokenAmount:
    fractional_amount = value * position.amount / position.market_value_refreshed
    return TokenAmount(mint=position.mint_address, amount=round_nearest(fractional_amount))


def _evaluate_stop_loss(
    current_value: Decimal,
    condition_threshold: Decimal,
    liquidation_threshold: Decimal,
) -> Optional[ConditionHit]:
    if current_value <= condition_threshold:
        return None
    if condition_threshold >= liquidation_threshold:
        # The current value is then past liquidation, which the liquidation logic handles first;
        # treat it as the maximum distance.
        return ConditionHit(normalized_distance_from_threshold=Decimal(1))
    current_distance = current_value - condition_threshold
    maximum_distance = liquidation_threshold - condition_threshold
    return ConditionHit(normalized_distance_from_threshold=current_distance / maximum_distance)


def _evaluate_take_profit(current_value: Decimal, condition_threshold: Decimal) -> Optional[ConditionHit]:
    if current_value >= condition_threshold:
        return None
    distance_towards_zero = condition_threshold - current_value
    return ConditionHit(normalized_distance_from_threshold=distance_towards_zero / condition_threshold)


def _calculate_debt_coll_price_ratio(obligation: "ObligationModel") -> Decimal:
    single_borrow = get_single_element(obligation.get_borrows(), "borrow")
    single_deposit = get_single_element(obligation.get_deposits(), "deposit")
    return single_borrow.token_price() / single_deposit.token_price()
