"""Reserve configuration snapshot model."""

from decimal import Decimal

from pydantic import Field, validator

from .base import FrozenModel


class ReserveModel(FrozenModel):
    """Represents one lending reserve (a single token market) of a lending market."""

    address: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    mint_address: str = Field(..., min_length=1)
    mint_decimals: int = Field(default=6, ge=0, le=30)

    loan_to_value_pct: int = Field(..., ge=0, le=100)
    liquidation_threshold_pct: int = Field(..., ge=0, le=100)
    borrow_factor_pct: int = Field(default=100, ge=100)

    @validator("symbol")
    def _uppercase_symbol(cls, value: str) -> str:
        """Force uppercase token symbols so lookups are case-insensitive."""
        return value.upper()

    @property
    def mint_factor(self) -> Decimal:
        """Number of lamports in one whole token."""
        return Decimal(10) ** self.mint_decimals

    @property
    def max_ltv(self) -> Decimal:
        """Configured loan-to-value as a ratio."""
        return Decimal(self.loan_to_value_pct) / 100

    @property
    def liquidation_ltv(self) -> Decimal:
        """Configured liquidation threshold as a ratio."""
        return Decimal(self.liquidation_threshold_pct) / 100

    @property
    def borrow_factor(self) -> Decimal:
        """Configured borrow factor as a ratio (``1.0`` meaning no extra weighting)."""
        return Decimal(self.borrow_factor_pct) / 100
