"""Day-boundary conventions used by the interest strategies."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DayCountFunc = Callable[[date, date], int]

EXCLUSIVE = "ACT/EXCL"
INCLUSIVE = "ACT/INCL"


def _act_exclusive(start: date, end: date) -> int:
    """Actual days from ``start`` up to but not including ``end``.

    The result is negative when ``end`` precedes ``start``; strategies rely
    on their own span checks rather than on this function.
    """
    return (end - start).days


def _act_inclusive(start: date, end: date) -> int:
    """Actual days counting both ``start`` and ``end``."""
    return (end - start).days + 1


_REGISTRY: Dict[str, DayCountFunc] = {
    EXCLUSIVE: _act_exclusive,
    INCLUSIVE: _act_inclusive,
}


def get_day_count(name: str) -> DayCountFunc:
    """Return a callable implementing the requested day-count convention."""
    key = name.upper()
    try:
        return _REGISTRY[key]
    except KeyError as exc:
        raise ValueError(f"Unsupported day count convention: {name}") from exc


def register_day_count(name: str, func: DayCountFunc) -> None:
    """Register a custom day-count convention."""
    key = name.upper()
    if key in _REGISTRY:
        raise ValueError(f"Day count '{name}' already registered")
    _REGISTRY[key] = func


def day_count(start: date, end: date, convention: str = EXCLUSIVE) -> int:
    """Count days between two dates under ``convention``."""
    days = get_day_count(convention)(start, end)
    logger.debug("Day count %s..%s (%s) = %d", start, end, convention, days)
    return days
