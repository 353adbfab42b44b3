"""Lending market snapshot model with reserve lookups."""

import logging
from typing import List

from pydantic import Field, root_validator

from .base import FrozenModel
from .exceptions import ModelNotFoundError
from .reserves import ReserveModel


logger = logging.getLogger(__name__)


class MarketModel(FrozenModel):
    """Represents an already-fetched lending market and its reserves."""

    address: str = Field(..., min_length=1)
    reserves: List[ReserveModel] = Field(default_factory=list)

    @root_validator(skip_on_failure=True)
    def _validate_unique_reserves(cls, values: dict) -> dict:
        """Reject markets listing the same reserve, symbol or mint twice."""
        try:
            reserves = values.get("reserves") or []
            for attribute in ("address", "symbol", "mint_address"):
                seen = [getattr(reserve, attribute) for reserve in reserves]
                if len(seen) != len(set(seen)):
                    raise ValueError("duplicate reserve {0} in market".format(attribute))
            return values
        except Exception:
            logger.exception("Market validation failed address=%s", values.get("address"))
            raise

    def get_existing_reserve_by_address(self, address: str) -> ReserveModel:
        """Return the reserve with the given address.

        Raises:
            ModelNotFoundError: If the market has no such reserve.
        """
        for reserve in self.reserves:
            if reserve.address == address:
                return reserve
        logger.warning("Reserve not found market=%s address=%s", self.address, address)
        raise ModelNotFoundError("reserve {0} not found in market {1}".format(address, self.address))

    def get_existing_reserve_by_symbol(self, symbol: str) -> ReserveModel:
        """Return the reserve whose token has the given symbol (case-insensitive).

        Raises:
            ModelNotFoundError: If the market has no such reserve.
        """
        normalized = str(symbol).strip().upper()
        for reserve in self.reserves:
            if reserve.symbol == normalized:
                return reserve
        logger.warning("Reserve not found market=%s symbol=%s", self.address, symbol)
        raise ModelNotFoundError("reserve for symbol {0} not found in market {1}".format(symbol, self.address))

    def get_existing_reserve_by_mint(self, mint_address: str) -> ReserveModel:
        """Return the reserve lending the given token mint.

        Raises:
            ModelNotFoundError: If the market has no such reserve.
        """
        for reserve in self.reserves:
            if reserve.mint_address == mint_address:
                return reserve
        logger.warning("Reserve not found market=%s mint=%s", self.address, mint_address)
        raise ModelNotFoundError("reserve for mint {0} not found in market {1}".format(mint_address, self.address))
