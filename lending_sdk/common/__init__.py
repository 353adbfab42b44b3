"""Common reusable utility exports."""

from .protocol_constants import (
    FULL_PCT,
    ONE_HUNDRED_PCT_IN_BPS,
    decimal_to_scaled_fraction,
    scaled_fraction_to_decimal,
)
from .validations import check_not_null, check_that, get_single_element

__all__ = [
    "FULL_PCT",
    "ONE_HUNDRED_PCT_IN_BPS",
    "decimal_to_scaled_fraction",
    "scaled_fraction_to_decimal",
    "check_not_null",
    "check_that",
    "get_single_element",
]
