"""Date, day-count and decimal helpers shared by the rate engine."""

from .date import (
    add_months,
    format_month,
    month_end,
    month_span,
    month_start,
    months_covering,
    snap_to_day,
    to_date,
    year_length,
)
from .daycount import day_count, get_day_count, register_day_count
from .mathutils import (
    AMOUNT_SCALE,
    BASIS_POINTS,
    POWER_SCALE,
    RATE_SCALE,
    calc_round,
    decimal_pow,
    divide,
    round_half_up,
    to_decimal,
)

__all__ = [
    "add_months",
    "format_month",
    "month_end",
    "month_span",
    "month_start",
    "months_covering",
    "snap_to_day",
    "to_date",
    "year_length",
    "day_count",
    "get_day_count",
    "register_day_count",
    "AMOUNT_SCALE",
    "BASIS_POINTS",
    "POWER_SCALE",
    "RATE_SCALE",
    "calc_round",
    "decimal_pow",
    "divide",
    "round_half_up",
    "to_decimal",
]
