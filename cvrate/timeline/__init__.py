"""Dated rate intervals per (plan code, rate type)."""

from .base import BaseRateTimeline, RateSource
from .cache import CachedRateTimeline
from .interval import INFINITE_END_DATE, RateInterval
from .loaders import (
    intervals_to_frame,
    load_timeline_frame,
    load_timeline_json,
    read_intervals_frame,
    read_intervals_json,
)
from .store import InMemoryRateTimeline

__all__ = [
    "BaseRateTimeline",
    "RateSource",
    "CachedRateTimeline",
    "INFINITE_END_DATE",
    "RateInterval",
    "InMemoryRateTimeline",
    "intervals_to_frame",
    "load_timeline_frame",
    "load_timeline_json",
    "read_intervals_frame",
    "read_intervals_json",
]
