"""Decimal arithmetic helpers for rate and interest math."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

NumberLike = Union[Decimal, int, float, str]

# Fractional digits kept by intermediate rate and amount divisions.
RATE_SCALE = 10
AMOUNT_SCALE = 10
# Fractional digits kept by compounding factors.
POWER_SCALE = 20
# Fractional digits kept by calc_round (storage precision of timeline rates).
CALC_ROUND_SCALE = 4

# Rates are quoted in hundredths of a percent: 250 means 2.50%.
BASIS_POINTS = Decimal("10000")
HUNDRED = Decimal("100")

_WORKING_PRECISION = 60


def to_decimal(value: NumberLike) -> Decimal:
    """
    Convert a number to Decimal.

    Floats go through ``str`` so that 0.1 becomes Decimal('0.1') rather
    than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a valid numeric amount")
    if isinstance(value, (int, str)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"Unsupported numeric type: {type(value)}")


def _quantum(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def round_half_up(value: Decimal, scale: int) -> Decimal:
    """
    Round ``value`` to ``scale`` fractional digits, ties away from zero.

    Parameters
    ----------
    value : Decimal
        Amount to round
    scale : int
        Number of fractional digits (0 for whole currency units)

    Returns
    -------
    Decimal
        The rounded amount, carrying exactly ``scale`` fractional digits
    """
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return value.quantize(_quantum(scale), rounding=ROUND_HALF_UP)


def divide(numerator: NumberLike, denominator: NumberLike, scale: int) -> Decimal:
    """Divide and round HALF_UP to ``scale`` fractional digits."""
    num = to_decimal(numerator)
    den = to_decimal(denominator)
    if den == 0:
        raise ZeroDivisionError("Division by zero in rate arithmetic")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        return (num / den).quantize(_quantum(scale), rounding=ROUND_HALF_UP)


def calc_round(rate: Decimal) -> Decimal:
    """Canonical rounding applied to day-weighted average rates."""
    return round_half_up(rate, CALC_ROUND_SCALE)


def decimal_pow(base: Decimal, exponent: Decimal, scale: int = POWER_SCALE) -> Decimal:
    """
    Raise ``base`` to a fractional ``exponent`` at high precision.

    Used for compounding factors ``(1 + r) ** (days / year_days)``; the
    power is evaluated with far more significant digits than ``scale`` and
    then rounded HALF_UP.
    """
    if base <= 0:
        raise ValueError(f"Compounding base must be positive, got {base}")
    with localcontext() as ctx:
        ctx.prec = _WORKING_PRECISION
        if exponent == 0:
            result = Decimal(1)
        else:
            result = base ** exponent
        return result.quantize(_quantum(scale), rounding=ROUND_HALF_UP)
