"""Settings-aware facade over the obligation order families."""

import logging
from typing import List, Optional, Sequence, Tuple

from lending_sdk.core.config import OrderSettings
from lending_sdk.core.logging_config import setup_logging
from lending_sdk.models.base import Address
from lending_sdk.models.enums import OrderType
from lending_sdk.models.market import MarketModel
from lending_sdk.models.obligation import ObligationModel
from lending_sdk.models.obligation_order import AvailableOrderExecution, ObligationOrderAtIndex
from lending_sdk.obligation_orders.common import ExecutionBonusBpsRange, OrderAction, OrderContext
from lending_sdk.obligation_orders.internal import to_order_index
from lending_sdk.obligation_orders.ltv_based import (
    LtvBasedOrderSpecification,
    StopLoss,
    TakeProfit,
    create_ltv_based_order,
    read_ltv_based_order,
)
from lending_sdk.obligation_orders.price_based import (
    PriceBasedOrderContext,
    PriceBasedOrderSpecification,
    SymbolOrMintAddress,
    create_price_based_order_for_usd_position,
    read_price_based_order_for_usd_position,
)


logger = logging.getLogger(__name__)


class ObligationOrderService:
    """Build, read and cancel obligation orders using the configured defaults."""

    def __init__(self, settings: OrderSettings) -> None:
        self._settings = settings
        setup_logging(settings.log_level)
        logger.info("Order service initialized: %s debug=%s", settings.app_name, settings.debug)

    def ltv_context(self, market: MarketModel, obligation: ObligationModel) -> OrderContext:
        """Return the context for LTV-based orders."""
        return OrderContext(market=market, obligation=obligation)

    def price_context(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        stablecoins: Optional[Sequence[SymbolOrMintAddress]] = None,
    ) -> PriceBasedOrderContext:
        """Return the context for price-based orders.

        Without explicit ``stablecoins``, the configured symbols and mints that
        the market actually lists are used.
        """
        if stablecoins is None:
            stablecoins = self._configured_stablecoins(market)
        return PriceBasedOrderContext(market=market, obligation=obligation, stablecoins=list(stablecoins))

    def _configured_stablecoins(self, market: MarketModel) -> List[SymbolOrMintAddress]:
        """Filter the configured stablecoins down to the ones listed by the market."""
        listed_symbols = {reserve.symbol for reserve in market.reserves}
        listed_mints = {reserve.mint_address for reserve in market.reserves}
        stablecoins: List[SymbolOrMintAddress] = [
            symbol for symbol in self._settings.stablecoin_symbols if symbol.upper() in listed_symbols
        ]
        stablecoins.extend(Address(mint) for mint in self._settings.stablecoin_mints if mint in listed_mints)
        return stablecoins

    def build_specification(
        self,
        trigger,
        action: OrderAction,
        execution_bonus_bps_range: Optional[ExecutionBonusBpsRange] = None,
    ):
        """Wrap a trigger into the matching family's specification.

        Args:
            trigger: An LTV-based or price-based trigger.
            action: What the order repays once executed.
            execution_bonus_bps_range: ``(min, max)`` bonus; the configured default when omitted.

        Returns:
            LtvBasedOrderSpecification | PriceBasedOrderSpecification: The specification.
        """
        if execution_bonus_bps_range is None:
            execution_bonus_bps_range = self._settings.default_execution_bonus_bps
        specification_type = (
            LtvBasedOrderSpecification if isinstance(trigger, (StopLoss, TakeProfit)) else PriceBasedOrderSpecification
        )
        return specification_type(
            trigger=trigger,
            action=action,
            execution_bonus_bps_range=execution_bonus_bps_range,
        )

    def set_ltv_based_order(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        order_type: OrderType,
        specification: Optional[LtvBasedOrderSpecification],
    ) -> ObligationOrderAtIndex:
        """Translate an LTV-based specification into the slot update for ``order_type``."""
        order_at_index = create_ltv_based_order(self.ltv_context(market, obligation), order_type, specification)
        logger.debug(
            "LTV-based order translated obligation=%s order_type=%s slot=%d",
            obligation.address,
            order_type,
            order_at_index.index,
        )
        return order_at_index

    def get_ltv_based_order(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        order_type: OrderType,
    ) -> Optional[LtvBasedOrderSpecification]:
        """Read the LTV-based order stored in the ``order_type`` slot."""
        return read_ltv_based_order(self.ltv_context(market, obligation), order_type)

    def set_price_based_order(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        order_type: OrderType,
        specification: Optional[PriceBasedOrderSpecification],
        stablecoins: Optional[Sequence[SymbolOrMintAddress]] = None,
    ) -> ObligationOrderAtIndex:
        """Translate a price-based specification into the slot update for ``order_type``."""
        context = self.price_context(market, obligation, stablecoins)
        order_at_index = create_price_based_order_for_usd_position(context, order_type, specification)
        logger.debug(
            "Price-based order translated obligation=%s order_type=%s slot=%d",
            obligation.address,
            order_type,
            order_at_index.index,
        )
        return order_at_index

    def get_price_based_order(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        order_type: OrderType,
        stablecoins: Optional[Sequence[SymbolOrMintAddress]] = None,
    ) -> Optional[PriceBasedOrderSpecification]:
        """Read the price-based order stored in the ``order_type`` slot."""
        return read_price_based_order_for_usd_position(
            self.price_context(market, obligation, stablecoins), order_type
        )

    def cancel_order(
        self,
        market: MarketModel,
        obligation: ObligationModel,
        order_type: OrderType,
    ) -> ObligationOrderAtIndex:
        """Return the empty slot update cancelling whatever order sits in the ``order_type`` slot.

        No family precondition applies, so any obligation's order can be cancelled.
        """
        index = to_order_index(order_type)
        logger.debug("Cancelling order obligation=%s market=%s slot=%d", obligation.address, market.address, index)
        return ObligationOrderAtIndex.empty(index)

    def list_available_executions(
        self,
        market: MarketModel,
        obligation: ObligationModel,
    ) -> List[Tuple[int, AvailableOrderExecution]]:
        """Return ``(slot index, execution)`` for every active order whose condition is currently met."""
        executions: List[Tuple[int, AvailableOrderExecution]] = []
        for index, order in enumerate(obligation.get_orders()):
            if order is None:
                continue
            execution = order.find_max_available_execution(market, obligation)
            if execution is not None:
                executions.append((index, execution))
        logger.debug("Available executions obligation=%s count=%d", obligation.address, len(executions))
        return executions
