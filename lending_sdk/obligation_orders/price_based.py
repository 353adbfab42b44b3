"""Price-based stop-loss and take-profit orders on "USD positions".

A USD position is a single-collateral, single-debt obligation where exactly
one side is a stablecoin, i.e. a long or short of some token against USD.
"""

from dataclasses import dataclass, field
from decimal import Decimal
import logging
from typing import FrozenSet, Iterable, List, Literal, Optional, Union

from pydantic import Field

from lending_sdk.common.validations import check_that, get_single_element
from lending_sdk.models.base import Address, FrozenModel
from lending_sdk.models.enums import OrderType, PositionType, PriceBasedOrderTriggerType
from lending_sdk.models.exceptions import OrderCompatibilityError, PositionClassificationError
from lending_sdk.models.market import MarketModel
from lending_sdk.models.obligation_order import (
    DebtCollPriceRatioAbove,
    DebtCollPriceRatioBelow,
    ObligationOrderAtIndex,
    OrderCondition,
)

from .common import OrderContext, OrderSpecification
from .family import OrderFamily
from .internal import trigger_type_name


logger = logging.getLogger(__name__)

# A token given by symbol (plain ``str``) or by mint (``Address``).
SymbolOrMintAddress = Union[str, Address]


@dataclass(frozen=True)
class PriceBasedOrderContext(OrderContext):
    """An :class:`OrderContext` extended with the tokens to be treated as stablecoins."""

    stablecoins: List[SymbolOrMintAddress] = field(default_factory=list)


class LongStopLoss(FrozenModel):
    """A trigger for a stop-loss on a long position."""

    type: Literal[PriceBasedOrderTriggerType.LONG_STOP_LOSS] = PriceBasedOrderTriggerType.LONG_STOP_LOSS
    when_collateral_price_below: Decimal = Field(..., gt=0)


class LongTakeProfit(FrozenModel):
    """A trigger for a take-profit on a long position."""

    type: Literal[PriceBasedOrderTriggerType.LONG_TAKE_PROFIT] = PriceBasedOrderTriggerType.LONG_TAKE_PROFIT
    when_collateral_price_above: Decimal = Field(..., gt=0)


class ShortStopLoss(FrozenModel):
    """A trigger for a stop-loss on a short position."""

    type: Literal[PriceBasedOrderTriggerType.SHORT_STOP_LOSS] = PriceBasedOrderTriggerType.SHORT_STOP_LOSS
    when_debt_price_above: Decimal = Field(..., gt=0)


class ShortTakeProfit(FrozenModel):
    """A trigger for a take-profit on a short position."""

    type: Literal[PriceBasedOrderTriggerType.SHORT_TAKE_PROFIT] = PriceBasedOrderTriggerType.SHORT_TAKE_PROFIT
    when_debt_price_below: Decimal = Field(..., gt=0)


PriceBasedOrderTrigger = Union[LongStopLoss, LongTakeProfit, ShortStopLoss, ShortTakeProfit]


class PriceBasedOrderSpecification(OrderSpecification):
    """A high-level specification of a price-based order."""

    trigger: PriceBasedOrderTrigger = Field(..., discriminator="type")


def resolve_position_type(context: PriceBasedOrderContext) -> PositionType:
    """Classify the obligation as a long or a short position.

    Stablecoin collateral makes a short (of the debt token), stablecoin debt
    makes a long (of the collateral token).

    Raises:
        ObligationShapeError: If the obligation does not have exactly one deposit and one borrow.
        PositionClassificationError: If both or neither sides are stablecoins.
    """
    collateral_reserve_address = get_single_element(context.obligation.deposits.keys(), "deposit")
    debt_reserve_address = get_single_element(context.obligation.borrows.keys(), "borrow")
    stablecoin_reserve_addresses = collect_reserve_addresses(context.market, context.stablecoins)
    if collateral_reserve_address in stablecoin_reserve_addresses:
        check_that(
            debt_reserve_address not in stablecoin_reserve_addresses,
            "cannot resolve long vs short position from all-stablecoins obligation",
            PositionClassificationError,
        )
        position_type = PositionType.SHORT
    else:
        check_that(
            debt_reserve_address in stablecoin_reserve_addresses,
            "cannot resolve long vs short position from no-stablecoins obligation",
            PositionClassificationError,
        )
        position_type = PositionType.LONG
    logger.debug("Resolved position obligation=%s type=%s", context.obligation.address, position_type)
    return position_type


def collect_reserve_addresses(market: MarketModel, symbol_or_mint_addresses: Iterable[SymbolOrMintAddress]) -> FrozenSet[str]:
    """Resolve tokens (by symbol, or by mint for :class:`Address` values) to their reserve addresses."""
    reserve_addresses = set()
    for symbol_or_mint_address in symbol_or_mint_addresses:
        if isinstance(symbol_or_mint_address, Address):
            reserve = market.get_existing_reserve_by_mint(symbol_or_mint_address)
        else:
            reserve = market.get_existing_reserve_by_symbol(symbol_or_mint_address)
        reserve_addresses.add(str(reserve.address))
    return frozenset(reserve_addresses)


def invert_price_ratio(price_ratio: Decimal) -> Decimal:
    """Turn a collateral price (in debt tokens) into a debt/collateral price ratio, or back."""
    return Decimal(1) / Decimal(price_ratio)


class PriceBasedOrderFamily(OrderFamily[PriceBasedOrderContext, PriceBasedOrderTrigger, PositionType]):
    """Orders triggered by the debt/collateral price ratio of a USD position.

    On-chain conditions are always expressed as debt price / collateral price.
    A long states its trigger in collateral price terms, hence the inversion;
    a short already states it in debt price terms.
    """

    name = "price-based"
    specification_type = PriceBasedOrderSpecification

    def resolve_profile(self, context: PriceBasedOrderContext) -> PositionType:
        return resolve_position_type(context)

    def to_condition(
        self,
        profile: PositionType,
        order_type: OrderType,
        trigger: PriceBasedOrderTrigger,
    ) -> OrderCondition:
        if profile == PositionType.LONG:
            if order_type == OrderType.STOP_LOSS and isinstance(trigger, LongStopLoss):
                return DebtCollPriceRatioAbove(invert_price_ratio(trigger.when_collateral_price_below))
            if order_type == OrderType.TAKE_PROFIT and isinstance(trigger, LongTakeProfit):
                return DebtCollPriceRatioBelow(invert_price_ratio(trigger.when_collateral_price_above))
        elif profile == PositionType.SHORT:
            if order_type == OrderType.STOP_LOSS and isinstance(trigger, ShortStopLoss):
                return DebtCollPriceRatioAbove(trigger.when_debt_price_above)
            if order_type == OrderType.TAKE_PROFIT and isinstance(trigger, ShortTakeProfit):
                return DebtCollPriceRatioBelow(trigger.when_debt_price_below)
        raise OrderCompatibilityError(
            "a price-based {0} order on a {1} position cannot use {2} condition".format(
                OrderType(order_type).value, PositionType(profile).value, trigger_type_name(trigger)
            )
        )

    def to_trigger(
        self,
        profile: PositionType,
        order_type: OrderType,
        condition: OrderCondition,
    ) -> PriceBasedOrderTrigger:
        check_that(
            condition.threshold() > 0,
            "a price-based {0} order has a non-positive on-chain threshold {1}".format(
                OrderType(order_type).value, condition.threshold()
            ),
            OrderCompatibilityError,
        )
        if profile == PositionType.LONG:
            if order_type == OrderType.STOP_LOSS and isinstance(condition, DebtCollPriceRatioAbove):
                return LongStopLoss(
                    when_collateral_price_below=invert_price_ratio(condition.min_debt_coll_price_ratio_exclusive)
                )
            if order_type == OrderType.TAKE_PROFIT and isinstance(condition, DebtCollPriceRatioBelow):
                return LongTakeProfit(
                    when_collateral_price_above=invert_price_ratio(condition.max_debt_coll_price_ratio_exclusive)
                )
        elif profile == PositionType.SHORT:
            if order_type == OrderType.STOP_LOSS and isinstance(condition, DebtCollPriceRatioAbove):
                return ShortStopLoss(when_debt_price_above=condition.min_debt_coll_price_ratio_exclusive)
            if order_type == OrderType.TAKE_PROFIT and isinstance(condition, DebtCollPriceRatioBelow):
                return ShortTakeProfit(when_debt_price_below=condition.max_debt_coll_price_ratio_exclusive)
        raise OrderCompatibilityError(
            "a price-based {0} order on a {1} position has an incompatible on-chain condition {2}".format(
                OrderType(order_type).value, PositionType(profile).value, type(condition).__name__
            )
        )


_PRICE_BASED_ORDERS = PriceBasedOrderFamily()


def create_price_based_order_for_usd_position(
    context: PriceBasedOrderContext,
    order_type: OrderType,
    specification: Optional[PriceBasedOrderSpecification],
) -> ObligationOrderAtIndex:
    """Creates a price-based order slot update from a stop-loss or take-profit specification.

    The result can be passed directly to the "set obligation order" instruction
    builder, which replaces (or cancels, if the specification is ``None``) the
    obligation's stop-loss or take-profit order on-chain.

    The position type is resolved first, so an obligation that is not a USD
    position is rejected even when cancelling.
    """
    return _PRICE_BASED_ORDERS.create_order(context, order_type, specification)


def read_price_based_order_for_usd_position(
    context: PriceBasedOrderContext,
    order_type: OrderType,
) -> Optional[PriceBasedOrderSpecification]:
    """Parses the specification of the USD position's stop-loss or take-profit order.

    The stored order is expected to be of matching type, i.e. as if it was
    created by :func:`create_price_based_order_for_usd_position`.
    """
    return _PRICE_BASED_ORDERS.read_order(context, order_type)
