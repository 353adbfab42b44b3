"""Canonical protocol constants and fixed-point math.

Every conversion here MUST match the lending program's on-chain encoding.

On-chain reference (klend `Fraction`, an unsigned 68.60 fixed-point number):
    value_sf = round(value * 2**60)
    value    = value_sf / 2**60

Order thresholds and opportunity parameters are stored as such scaled
fractions, while execution bonus rates are stored as whole basis points.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, localcontext
from typing import Union

# ---------------------------------------------------------------------------
# Percent scales
# ---------------------------------------------------------------------------
FULL_PCT: int = 100
ONE_HUNDRED_PCT_IN_BPS: int = 10_000

# Execution bonus bps are stored as u16.
MAX_EXECUTION_BONUS_BPS: int = 2**16 - 1

# ---------------------------------------------------------------------------
# On-chain scaled fraction (U68F60)
# ---------------------------------------------------------------------------
FRACTION_BITS: int = 60
FRACTION_ONE_SCALED: int = 2**FRACTION_BITS
FRACTION_MAX_SCALED: int = 2**128 - 1

# Decimal places that survive a round trip through the 60-bit fractional part
# (one unit of 2**-60 is ~8.7e-19).
FRACTION_DECIMAL_PLACES: int = 18

_WORKING_PRECISION: int = 80

DecimalLike = Union[Decimal, int, str]


def round_nearest(value: DecimalLike) -> Decimal:
    """Round half-up to an integral ``Decimal``, like the SDK's ``roundNearest``."""
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return Decimal(value).to_integral_value(rounding=ROUND_HALF_UP)


def decimal_to_scaled_fraction(value: DecimalLike) -> int:
    """Convert a human-scale decimal into its on-chain scaled-fraction integer.

    Example:  Decimal("0.5")  ->  576460752303423488
    """
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        scaled = (Decimal(value) * FRACTION_ONE_SCALED).to_integral_value(rounding=ROUND_HALF_EVEN)
    raw = int(scaled)
    if raw < 0 or raw > FRACTION_MAX_SCALED:
        raise ValueError("value {0} cannot be represented as an on-chain fraction".format(value))
    return raw


def scaled_fraction_to_decimal(raw: int) -> Decimal:
    """Convert an on-chain scaled-fraction integer back to a human-scale decimal.

    The result is quantized to the decimal places the encoding can carry, so
    ``scaled_fraction_to_decimal(decimal_to_scaled_fraction(x)) == x`` for any
    ``x`` with at most 18 decimal places.
    """
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        exact = Decimal(int(raw)) / FRACTION_ONE_SCALED
        quantized = exact.quantize(Decimal(1).scaleb(-FRACTION_DECIMAL_PLACES), rounding=ROUND_HALF_EVEN)
        normalized = quantized.normalize()
        if normalized.as_tuple().exponent > 0:
            normalized = normalized.quantize(Decimal(1))
    return normalized


FRACTION_MAX: Decimal = scaled_fraction_to_decimal(FRACTION_MAX_SCALED)


def bps_to_rate(bps: DecimalLike) -> Decimal:
    """Convert basis points to a fraction.  Example:  50  ->  0.005"""
    return Decimal(bps) / ONE_HUNDRED_PCT_IN_BPS


def rate_to_bps(rate: DecimalLike) -> Decimal:
    """Convert a fraction to basis points.  Example:  0.005  ->  50"""
    return Decimal(rate) * ONE_HUNDRED_PCT_IN_BPS


def pct_to_rate(pct: DecimalLike) -> Decimal:
    """Convert a percentage to a fraction.  Example:  80  ->  0.8"""
    return Decimal(pct) / FULL_PCT


def rate_to_pct(rate: DecimalLike) -> Decimal:
    """Convert a fraction to a percentage.  Example:  0.8  ->  80"""
    return Decimal(rate) * FULL_PCT
