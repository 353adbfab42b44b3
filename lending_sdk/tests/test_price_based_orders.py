"""Unit tests for price-based orders on USD positions."""

from decimal import Decimal
import unittest

from pydantic import ValidationError

from lending_sdk.common.protocol_constants import decimal_to_scaled_fraction
from lending_sdk.models.base import Address
from lending_sdk.models.enums import OrderType, PositionType
from lending_sdk.models.exceptions import (
    ImmediatelyTriggeredOrderError,
    ModelNotFoundError,
    ObligationShapeError,
    OrderCompatibilityError,
    OrderRangeError,
    PositionClassificationError,
)
from lending_sdk.models.obligation_order import (
    DebtCollPriceRatioAbove,
    DebtCollPriceRatioBelow,
    DeleverageAllDebt,
    ObligationOrder,
    UserLtvAbove,
)
from lending_sdk.obligation_orders.common import FullRepay
from lending_sdk.obligation_orders.price_based import (
    LongStopLoss,
    LongTakeProfit,
    PriceBasedOrderContext,
    PriceBasedOrderSpecification,
    ShortStopLoss,
    ShortTakeProfit,
    create_price_based_order_for_usd_position,
    read_price_based_order_for_usd_position,
    resolve_position_type,
)
from lending_sdk.tests.builders import (
    JTO_RESERVE,
    SOL_RESERVE,
    USDC_MINT,
    USDC_RESERVE,
    USDT_RESERVE,
    build_market,
    build_obligation,
    long_sol_obligation,
    position,
    short_jto_obligation,
    stablecoin_symbols,
    with_orders,
)


def _specification(trigger) -> PriceBasedOrderSpecification:
    return PriceBasedOrderSpecification(trigger=trigger, action=FullRepay(), execution_bonus_bps_range=(50, 200))


class PositionTypeResolutionTests(unittest.TestCase):
    """Validate long vs short classification."""

    def setUp(self) -> None:
        self.market = build_market()

    def _context(self, obligation, stablecoins=None) -> PriceBasedOrderContext:
        if stablecoins is None:
            stablecoins = stablecoin_symbols()
        return PriceBasedOrderContext(market=self.market, obligation=obligation, stablecoins=stablecoins)

    def test_stablecoin_debt_is_long(self) -> None:
        """SOL collateral against USDC debt is a long."""
        self.assertEqual(resolve_position_type(self._context(long_sol_obligation(self.market))), PositionType.LONG)

    def test_stablecoin_collateral_is_short(self) -> None:
        """USDC collateral against JTO debt is a short."""
        self.assertEqual(resolve_position_type(self._context(short_jto_obligation(self.market))), PositionType.SHORT)

    def test_resolution_is_logged_at_debug(self) -> None:
        """The resolved position type is logged for the obligation."""
        obligation = long_sol_obligation(self.market)
        with self.assertLogs("lending_sdk.obligation_orders.price_based", level="DEBUG") as logs:
            resolve_position_type(self._context(obligation))
        self.assertEqual(len(logs.records), 1)
        self.assertIn("Resolved position obligation={0}".format(obligation.address), logs.output[0])

    def test_stablecoins_can_be_given_by_mint(self) -> None:
        """An Address entry is looked up by mint rather than by symbol."""
        context = self._context(long_sol_obligation(self.market), stablecoins=[USDC_MINT])
        self.assertEqual(resolve_position_type(context), PositionType.LONG)

    def test_plain_string_is_looked_up_as_symbol(self) -> None:
        """A mint given as a plain string is treated as an unknown symbol."""
        context = self._context(long_sol_obligation(self.market), stablecoins=[str(USDC_MINT)])
        with self.assertRaises(ModelNotFoundError):
            resolve_position_type(context)

    def test_all_stablecoins_is_rejected(self) -> None:
        """USDC against USDT is neither long nor short."""
        obligation = build_obligation(
            self.market,
            deposits=[position(USDC_RESERVE, 1000)],
            borrows=[position(USDT_RESERVE, 100)],
        )
        with self.assertRaises(PositionClassificationError) as ctx:
            resolve_position_type(self._context(obligation))
        self.assertIn("all-stablecoins", str(ctx.exception))

    def test_no_stablecoins_is_rejected(self) -> None:
        """SOL against JTO is neither long nor short."""
        obligation = build_obligation(
            self.market,
            deposits=[position(SOL_RESERVE, 10)],
            borrows=[position(JTO_RESERVE, 10)],
        )
        with self.assertRaises(PositionClassificationError) as ctx:
            resolve_position_type(self._context(obligation))
        self.assertIn("no-stablecoins", str(ctx.exception))

    def test_multiple_deposits_are_rejected(self) -> None:
        """Classification requires a single deposit."""
        obligation = build_obligation(
            self.market,
            deposits=[position(SOL_RESERVE, 10), position(JTO_RESERVE, 10)],
            borrows=[position(USDC_RESERVE, 100)],
        )
        with self.assertRaises(ObligationShapeError):
            resolve_position_type(self._context(obligation))

    def test_missing_borrow_is_rejected(self) -> None:
        """Classification requires a single borrow."""
        obligation = build_obligation(self.market, deposits=[position(SOL_RESERVE, 10)])
        with self.assertRaises(ObligationShapeError) as ctx:
            resolve_position_type(self._context(obligation))
        self.assertIn("expected exactly one borrow, got none", str(ctx.exception))


class LongPositionOrderTests(unittest.TestCase):
    """Validate orders on a SOL-long position (SOL at 150 USD)."""

    def setUp(self) -> None:
        self.market = build_market()
        self.obligation = long_sol_obligation(self.market)
        self.context = PriceBasedOrderContext(
            market=self.market, obligation=self.obligation, stablecoins=stablecoin_symbols()
        )

    def _read(self, order_at_index, order_type):
        obligation = with_orders(self.obligation, order_at_index)
        context = PriceBasedOrderContext(market=self.market, obligation=obligation, stablecoins=stablecoin_symbols())
        return read_price_based_order_for_usd_position(context, order_type)

    def test_take_profit_stores_inverted_price(self) -> None:
        """Take-profit at 200 USD is stored as a debt/collateral ratio below 1/200."""
        result = create_price_based_order_for_usd_position(
            self.context, OrderType.TAKE_PROFIT, _specification(LongTakeProfit(when_collateral_price_above=200))
        )
        self.assertEqual(result.index, 1)
        self.assertEqual(result.order.condition, DebtCollPriceRatioBelow(Decimal("0.005")))
        self.assertEqual(result.order_state().condition_threshold_sf, decimal_to_scaled_fraction(Decimal("0.005")))

    def test_take_profit_round_trips(self) -> None:
        """Reading the take-profit back yields the collateral price of 200."""
        order_at_index = create_price_based_order_for_usd_position(
            self.context, OrderType.TAKE_PROFIT, _specification(LongTakeProfit(when_collateral_price_above=200))
        )
        specification = self._read(order_at_index, OrderType.TAKE_PROFIT)
        self.assertIsInstance(specification.trigger, LongTakeProfit)
        self.assertEqual(specification.trigger.when_collateral_price_above, Decimal(200))
        self.assertEqual(specification.action, FullRepay())
        self.assertEqual(specification.execution_bonus_bps_range, (Decimal(50), Decimal(200)))

    def test_stop_loss_round_trips(self) -> None:
        """A stop-loss at 100 USD is stored as a ratio above 0.01 and read back as 100."""
        order_at_index = create_price_based_order_for_usd_position(
            self.context, OrderType.STOP_LOSS, _specification(LongStopLoss(when_collateral_price_below=100))
        )
        self.assertEqual(order_at_index.index, 0)
        self.assertEqual(order_at_index.order.condition, DebtCollPriceRatioAbove(Decimal("0.01")))
        specification = self._read(order_at_index, OrderType.STOP_LOSS)
        self.assertEqual(specification.trigger, LongStopLoss(when_collateral_price_below=100))

    def test_stop_loss_above_current_price_is_immediately_triggered(self) -> None:
        """A stop-loss at 160 USD fires right away when SOL trades at 150."""
        with self.assertRaises(ImmediatelyTriggeredOrderError):
            create_price_based_order_for_usd_position(
                self.context, OrderType.STOP_LOSS, _specification(LongStopLoss(when_collateral_price_below=160))
            )

    def test_short_trigger_on_long_position_is_rejected(self) -> None:
        """The error names both the position type and the trigger type."""
        with self.assertRaises(OrderCompatibilityError) as ctx:
            create_price_based_order_for_usd_position(
                self.context, OrderType.STOP_LOSS, _specification(ShortStopLoss(when_debt_price_above=5))
            )
        message = str(ctx.exception)
        self.assertIn("Long", message)
        self.assertIn("ShortStopLoss", message)

    def test_trigger_must_match_order_type(self) -> None:
        """A long stop-loss trigger cannot go into the take-profit slot."""
        with self.assertRaises(OrderCompatibilityError):
            create_price_based_order_for_usd_position(
                self.context, OrderType.TAKE_PROFIT, _specification(LongStopLoss(when_collateral_price_below=100))
            )

    def test_cancellation_still_requires_usd_position(self) -> None:
        """Cancelling returns an empty slot, but only for a classifiable obligation."""
        result = create_price_based_order_for_usd_position(self.context, OrderType.STOP_LOSS, None)
        self.assertEqual(result.index, 0)
        self.assertIsNone(result.order)
        context = PriceBasedOrderContext(market=self.market, obligation=self.obligation, stablecoins=[])
        with self.assertRaises(PositionClassificationError):
            create_price_based_order_for_usd_position(context, OrderType.STOP_LOSS, None)

    def test_ltv_condition_is_incompatible_on_read(self) -> None:
        """A slot holding an LTV condition cannot be read as a price-based order."""
        order = ObligationOrder(
            condition=UserLtvAbove(Decimal("0.6")),
            opportunity=DeleverageAllDebt(),
            min_execution_bonus_rate=Decimal("0.005"),
        )
        with self.assertRaises(OrderCompatibilityError) as ctx:
            self._read(order.at_index(0), OrderType.STOP_LOSS)
        self.assertIn("incompatible on-chain condition UserLtvAbove", str(ctx.exception))

    def test_empty_slot_reads_as_none(self) -> None:
        """No order means no specification."""
        self.assertIsNone(read_price_based_order_for_usd_position(self.context, OrderType.TAKE_PROFIT))

    def test_stop_loss_price_too_low_to_store_is_rejected(self) -> None:
        """A tiny collateral price inverts into a ratio above the largest storable fraction."""
        with self.assertRaises(OrderRangeError) as ctx:
            create_price_based_order_for_usd_position(
                self.context,
                OrderType.STOP_LOSS,
                _specification(LongStopLoss(when_collateral_price_below=Decimal("1E-22"))),
            )
        self.assertIn("cannot be stored on-chain", str(ctx.exception))

    def test_zero_threshold_is_incompatible_on_read(self) -> None:
        """A stored zero price ratio cannot be inverted into a collateral price."""
        order = ObligationOrder(
            condition=DebtCollPriceRatioAbove(Decimal(0)),
            opportunity=DeleverageAllDebt(),
            min_execution_bonus_rate=Decimal("0.005"),
        )
        with self.assertRaises(OrderCompatibilityError) as ctx:
            self._read(order.at_index(0), OrderType.STOP_LOSS)
        self.assertIn("non-positive on-chain threshold", str(ctx.exception))


class ShortPositionOrderTests(unittest.TestCase):
    """Validate orders on a JTO-short position (JTO at 3 USD)."""

    def setUp(self) -> None:
        self.market = build_market()
        self.obligation = short_jto_obligation(self.market)
        self.context = PriceBasedOrderContext(
            market=self.market, obligation=self.obligation, stablecoins=stablecoin_symbols()
        )

    def _read(self, order_at_index, order_type):
        obligation = with_orders(self.obligation, order_at_index)
        context = PriceBasedOrderContext(market=self.market, obligation=obligation, stablecoins=stablecoin_symbols())
        return read_price_based_order_for_usd_position(context, order_type)

    def test_stop_loss_stores_price_directly(self) -> None:
        """A short stop-loss at 5 USD is stored as a ratio above 5 and read back as 5."""
        order_at_index = create_price_based_order_for_usd_position(
            self.context, OrderType.STOP_LOSS, _specification(ShortStopLoss(when_debt_price_above=5))
        )
        self.assertEqual(order_at_index.order.condition, DebtCollPriceRatioAbove(Decimal(5)))
        specification = self._read(order_at_index, OrderType.STOP_LOSS)
        self.assertEqual(specification.trigger.when_debt_price_above, Decimal(5))

    def test_take_profit_round_trips(self) -> None:
        """A short take-profit at 2 USD is stored as a ratio below 2."""
        order_at_index = create_price_based_order_for_usd_position(
            self.context, OrderType.TAKE_PROFIT, _specification(ShortTakeProfit(when_debt_price_below=2))
        )
        self.assertEqual(order_at_index.order.condition, DebtCollPriceRatioBelow(Decimal(2)))
        specification = self._read(order_at_index, OrderType.TAKE_PROFIT)
        self.assertEqual(specification.trigger, ShortTakeProfit(when_debt_price_below=2))

    def test_long_trigger_on_short_position_is_rejected(self) -> None:
        """Long triggers do not apply to a short."""
        with self.assertRaises(OrderCompatibilityError) as ctx:
            create_price_based_order_for_usd_position(
                self.context, OrderType.TAKE_PROFIT, _specification(LongTakeProfit(when_collateral_price_above=200))
            )
        self.assertIn("Short", str(ctx.exception))
        self.assertIn("LongTakeProfit", str(ctx.exception))

    def test_take_profit_price_too_small_to_store_is_rejected(self) -> None:
        """A debt price below the fraction resolution would be stored as zero."""
        with self.assertRaises(OrderRangeError) as ctx:
            create_price_based_order_for_usd_position(
                self.context,
                OrderType.TAKE_PROFIT,
                _specification(ShortTakeProfit(when_debt_price_below=Decimal("1E-19"))),
            )
        self.assertIn("too small to be stored on-chain", str(ctx.exception))


class PriceTriggerValidationTests(unittest.TestCase):
    """Validate trigger models."""

    def test_prices_must_be_positive(self) -> None:
        """Zero or negative prices are rejected."""
        with self.assertRaises(ValidationError):
            LongStopLoss(when_collateral_price_below=0)
        with self.assertRaises(ValidationError):
            ShortTakeProfit(when_debt_price_below=-1)

    def test_stablecoin_context_keeps_addresses(self) -> None:
        """Mint entries keep their Address type inside the context."""
        market = build_market()
        context = PriceBasedOrderContext(
            market=market, obligation=long_sol_obligation(market), stablecoins=[Address(USDC_MINT), "USDT"]
        )
        self.assertIsInstance(context.stablecoins[0], Address)
        self.assertNotIsInstance(context.stablecoins[1], Address)


if __name__ == "__main__":
    unittest.main()
