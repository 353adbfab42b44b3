"""Obligation (lending position) snapshot model."""

from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field, root_validator, validator

from .base import FrozenModel
from .market import MarketModel
from .obligation_order import NULL_ORDER_STATE, ObligationOrder, ObligationOrderState, decode_order_states
from .reserves import ReserveModel


logger = logging.getLogger(__name__)

ORDER_SLOTS = 2


class PositionModel(FrozenModel):
    """A single deposit or borrow of an obligation."""

    reserve_address: str = Field(..., min_length=1)
    mint_address: str = Field(..., min_length=1)
    mint_factor: Decimal = Field(..., gt=0)
    amount: Decimal = Field(..., ge=0, description="Lamports, including accrued interest.")
    market_value_refreshed: Decimal = Field(..., ge=0, description="USD value, no borrow factor weighting.")

    @classmethod
    def from_tokens(cls, reserve: ReserveModel, tokens: Decimal, price: Decimal) -> "PositionModel":
        """Build a position holding ``tokens`` whole tokens of the reserve, valued at ``price`` USD each."""
        tokens = Decimal(tokens)
        return cls(
            reserve_address=reserve.address,
            mint_address=reserve.mint_address,
            mint_factor=reserve.mint_factor,
            amount=tokens * reserve.mint_factor,
            market_value_refreshed=tokens * Decimal(price),
        )

    def token_price(self) -> Decimal:
        """USD price of one whole token of this position."""
        return self.market_value_refreshed * self.mint_factor / self.amount


class ObligationStats(FrozenModel):
    """Refreshed USD totals of an obligation, following the on-chain definitions."""

    user_total_deposit: Decimal = Field(default=Decimal(0), ge=0)
    user_total_borrow: Decimal = Field(default=Decimal(0), ge=0)
    user_total_borrow_borrow_factor_adjusted: Decimal = Field(default=Decimal(0), ge=0)
    borrow_liquidation_limit: Decimal = Field(default=Decimal(0), ge=0)

    @classmethod
    def compute(
        cls,
        market: MarketModel,
        deposits: Iterable[PositionModel],
        borrows: Iterable[PositionModel],
    ) -> "ObligationStats":
        """Aggregate position values using the market's reserve configuration."""
        user_total_deposit = Decimal(0)
        borrow_liquidation_limit = Decimal(0)
        for deposit in deposits:
            reserve = market.get_existing_reserve_by_address(deposit.reserve_address)
            user_total_deposit += deposit.market_value_refreshed
            borrow_liquidation_limit += deposit.market_value_refreshed * reserve.liquidation_ltv
        user_total_borrow = Decimal(0)
        user_total_borrow_borrow_factor_adjusted = Decimal(0)
        for borrow in borrows:
            reserve = market.get_existing_reserve_by_address(borrow.reserve_address)
            user_total_borrow += borrow.market_value_refreshed
            user_total_borrow_borrow_factor_adjusted += borrow.market_value_refreshed * reserve.borrow_factor
        return cls(
            user_total_deposit=user_total_deposit,
            user_total_borrow=user_total_borrow,
            user_total_borrow_borrow_factor_adjusted=user_total_borrow_borrow_factor_adjusted,
            borrow_liquidation_limit=borrow_liquidation_limit,
        )


class ObligationModel(FrozenModel):
    """Represents an already-fetched obligation: deposits, borrows and its two order slots."""

    address: str = Field(..., min_length=1)
    market_address: str = Field(..., min_length=1)
    deposits: Dict[str, PositionModel] = Field(default_factory=dict)
    borrows: Dict[str, PositionModel] = Field(default_factory=dict)
    refreshed_stats: ObligationStats = Field(default_factory=ObligationStats)
    orders: List[ObligationOrderState] = Field(default_factory=lambda: [NULL_ORDER_STATE] * ORDER_SLOTS)

    @validator("orders")
    def _validate_order_slots(cls, value: List[ObligationOrderState]) -> List[ObligationOrderState]:
        """Every obligation has exactly two order slots."""
        if len(value) != ORDER_SLOTS:
            raise ValueError("an obligation has exactly {0} order slots, got {1}".format(ORDER_SLOTS, len(value)))
        return value

    @root_validator(skip_on_failure=True)
    def _validate_position_keys(cls, values: dict) -> dict:
        """Ensure positions are keyed by their own reserve address."""
        try:
            for side in ("deposits", "borrows"):
                for reserve_address, position in (values.get(side) or {}).items():
                    if reserve_address != position.reserve_address:
                        raise ValueError(
                            "{0} entry {1} holds a position of reserve {2}".format(
                                side, reserve_address, position.reserve_address
                            )
                        )
            return values
        except Exception:
            logger.exception("Obligation validation failed address=%s", values.get("address"))
            raise

    @classmethod
    def build(
        cls,
        market: MarketModel,
        address: str,
        deposits: Iterable[PositionModel] = (),
        borrows: Iterable[PositionModel] = (),
        orders: Optional[List[ObligationOrderState]] = None,
    ) -> "ObligationModel":
        """Create an obligation snapshot, computing its refreshed stats from the market."""
        deposits = list(deposits)
        borrows = list(borrows)
        return cls(
            address=address,
            market_address=market.address,
            deposits={deposit.reserve_address: deposit for deposit in deposits},
            borrows={borrow.reserve_address: borrow for borrow in borrows},
            refreshed_stats=ObligationStats.compute(market, deposits, borrows),
            orders=list(orders) if orders is not None else [NULL_ORDER_STATE] * ORDER_SLOTS,
        )

    def get_deposits(self) -> List[PositionModel]:
        """Return the obligation deposits as a list."""
        return list(self.deposits.values())

    def get_borrows(self) -> List[PositionModel]:
        """Return the obligation borrows as a list."""
        return list(self.borrows.values())

    def get_borrow_by_mint(self, mint_address: str) -> Optional[PositionModel]:
        """Return the borrow of the given token mint, if any."""
        for borrow in self.borrows.values():
            if borrow.mint_address == mint_address:
                return borrow
        return None

    def get_orders(self) -> List[Optional[ObligationOrder]]:
        """Return the decoded order slots, with ``None`` for the empty ones."""
        return decode_order_states(self.orders)

    def get_active_orders(self) -> List[ObligationOrder]:
        """Return only the slots holding an order."""
        return [order for order in self.get_orders() if order is not None]

    def loan_to_value(self) -> Decimal:
        """Current borrowed value (borrow-factor adjusted) over *all* deposits, as on-chain.

        Unlike a UI-oriented LTV, 0-LTV collaterals are included in the denominator.
        """
        if self.refreshed_stats.user_total_deposit == 0:
            return Decimal(0)
        return self.refreshed_stats.user_total_borrow_borrow_factor_adjusted / self.refreshed_stats.user_total_deposit

    def liquidation_ltv(self) -> Decimal:
        """LTV (over *all* deposits) at which the obligation becomes liquidatable."""
        if self.refreshed_stats.user_total_deposit == 0:
            return Decimal(0)
        return self.refreshed_stats.borrow_liquidation_limit / self.refreshed_stats.user_total_deposit

    def no_bf_loan_to_value(self) -> Decimal:
        """Current borrowed value over deposited value, disregarding the borrow factor."""
        if self.refreshed_stats.user_total_deposit == 0:
            return Decimal(0)
        return self.refreshed_stats.user_total_borrow / self.refreshed_stats.user_total_deposit

    def get_ltv_for_reserve(self, market: MarketModel, reserve_address: str) -> Tuple[Decimal, Decimal]:
        """Return ``(max_ltv, liquidation_ltv)`` of a collateral reserve as ratios."""
        reserve = market.get_existing_reserve_by_address(reserve_address)
        return reserve.max_ltv, reserve.liquidation_ltv
