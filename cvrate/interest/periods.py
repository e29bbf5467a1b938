"""
Period generators for the month-by-month calculations.

Each generator lazily yields one :class:`Period` per iteration step; the
strategies fold over them. Window shapes differ between calculation
families and are not interchangeable.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterator

from cvrate.utils.date import add_months, month_start, snap_to_day
from cvrate.utils.daycount import EXCLUSIVE, day_count

# Loan windows end on this day of the month (clamped to the month end).
LOAN_SNAP_DAY = 31


@dataclass(frozen=True)
class Period:
    """One iteration step.

    Attributes:
        index: 1-based step number
        start_date: Window start
        end_date: Window end
        days: Day count attributed to the window
        rate_date: Date used for the rate lookup of the window
    """

    index: int
    start_date: date
    end_date: date
    days: int
    rate_date: date


def rolling_month_periods(begin: date, end: date, months: int) -> Iterator[Period]:
    """
    Windows of one month from ``begin``, each ending at the earlier of the next
    monthly step and ``end``.

    The step advances from the window start by whole months. Day counts are
    exclusive of the window end and may be negative when ``months`` runs past
    ``end``; callers decide how to treat those.
    """
    current = begin
    for index in range(1, months + 1):
        next_step = add_months(current, 1)
        window_end = end if next_step > end else next_step
        yield Period(
            index=index,
            start_date=current,
            end_date=window_end,
            days=day_count(current, window_end, EXCLUSIVE),
            rate_date=month_start(current),
        )
        current = next_step


def snapped_month_periods(begin: date, end: date, months: int) -> Iterator[Period]:
    """
    Calendar-month windows snapped to the 31st, truncated at ``end``.

    Every window but the last counts one extra day, so the windows tile the
    span when summed. After the first window, each window starts on the
    first day of the following calendar month of ``begin``.
    """
    current = begin
    for index in range(1, months + 1):
        snapped = snap_to_day(current, LOAN_SNAP_DAY)
        window_end = end if snapped > end else snapped
        days = day_count(current, window_end, EXCLUSIVE)
        if index != months:
            days += 1
        yield Period(
            index=index,
            start_date=current,
            end_date=window_end,
            days=days,
            rate_date=month_start(current),
        )
        current = month_start(add_months(begin, index))


def calendar_month_periods(begin: date, end: date, months: int) -> Iterator[Period]:
    """
    Windows ending on the first day of the next calendar month, or on ``end``
    once that boundary reaches it.
    """
    current = begin
    for index in range(1, months + 1):
        boundary = month_start(add_months(current, 1))
        window_end = end if boundary >= end else boundary
        yield Period(
            index=index,
            start_date=current,
            end_date=window_end,
            days=day_count(current, window_end, EXCLUSIVE),
            rate_date=month_start(current),
        )
        current = add_months(month_start(current), 1)


def month_steps(begin: date, months: int) -> Iterator[date]:
    """Month-start lookup dates of ``months`` consecutive monthly steps from ``begin``."""
    current = begin
    for _ in range(months):
        yield month_start(current)
        current = add_months(current, 1)


def trailing_month_starts(anchor: date, count: int = 12) -> Iterator[date]:
    """The ``count`` month starts preceding ``anchor``'s month, most recent first."""
    current = month_start(anchor)
    for _ in range(count):
        current = add_months(current, -1)
        yield current
