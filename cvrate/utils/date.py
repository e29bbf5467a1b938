import calendar
from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta
from pandas import Timestamp

DATE_FMT = "%Y-%m-%d"
COMPACT_FMT = "%Y%m%d"
SLASH_FMT = "%Y/%m/%d"

DateLike = Union[str, date, datetime, Timestamp]


def to_date(date_like: DateLike) -> date:
    """
    Convert a string, datetime or pandas Timestamp to a plain date.
    Accepts 'YYYY-MM-DD', 'YYYYMMDD' and 'YYYY/MM/DD' string formats.
    """
    if isinstance(date_like, Timestamp):
        return date_like.date()
    if isinstance(date_like, datetime):
        return date_like.date()
    if isinstance(date_like, date):
        return date_like
    if isinstance(date_like, str):
        for fmt in (DATE_FMT, COMPACT_FMT, SLASH_FMT):
            try:
                return datetime.strptime(date_like, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Unsupported date string format: {date_like!r}")
    raise TypeError(f"Unsupported type for date: {type(date_like)}")


def to_optional_date(date_like: Optional[DateLike]) -> Optional[date]:
    """Like :func:`to_date` but passes ``None`` through."""
    if date_like is None:
        return None
    return to_date(date_like)


def year_length(dt: date) -> int:
    """
    Calendar length of the year containing ``dt`` (366 in leap years, else 365).

    This is the denominator of every day-weighted interest formula, not the
    length of the calculation span.
    """
    return 366 if calendar.isleap(dt.year) else 365


def month_span(begin: date, end: date) -> int:
    """
    Whole-month distance between the year-months of two dates.

    Day-of-month is ignored: 2020-01-31 -> 2020-02-01 is one month and
    2020-01-01 -> 2020-12-31 is eleven. Callers apply their own correction.
    """
    return (end.year - begin.year) * 12 + (end.month - begin.month)


def month_start(dt: date) -> date:
    """First day of the month of ``dt``; the key used for monthly rate lookups."""
    return dt.replace(day=1)


def month_end(dt: date) -> date:
    """Last day of the month of ``dt``."""
    return dt.replace(day=calendar.monthrange(dt.year, dt.month)[1])


def snap_to_day(dt: date, day: int) -> date:
    """
    Move ``dt`` to the given day of its month, clamped to the month end.

    ``snap_to_day(date(2020, 2, 10), 31)`` is 2020-02-29.
    """
    last_day = calendar.monthrange(dt.year, dt.month)[1]
    return dt.replace(day=min(day, last_day))


def add_months(dt: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's end."""
    return dt + relativedelta(months=months)


def months_covering(begin: date, end: date) -> int:
    """
    Number of monthly steps from ``begin`` needed to reach ``end``, at least one.

    Unlike :func:`month_span` a partial trailing month counts:
    2020-01-01 -> 2020-12-31 is twelve and 2020-01-01 -> 2020-03-20 is three.
    """
    months = max(month_span(begin, end) - 1, 1)
    while add_months(begin, months) < end:
        months += 1
    return months


def format_month(dt: date) -> str:
    """Month label in 'YYYY/MM' form."""
    return f"{dt.year:04d}/{dt.month:02d}"
