"""
Read-through cache in front of a rate timeline.

Any mutation of a (plan code, rate type) timeline evicts that timeline's
cached lookups before the mutating call returns.
"""

import logging
import threading
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .base import BaseRateTimeline
from .interval import RateInterval, TimelineKey

logger = logging.getLogger(__name__)

_CacheKey = Tuple[str, str, date]


class CachedRateTimeline(BaseRateTimeline):
    """LRU cache of effective-rate lookups over another timeline."""

    def __init__(self, inner: BaseRateTimeline, max_size: int = 10000):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.inner = inner
        self.max_size = max_size
        self._entries: "OrderedDict[_CacheKey, Optional[RateInterval]]" = OrderedDict()
        self._by_timeline: Dict[TimelineKey, Set[_CacheKey]] = {}
        # Bumped by every invalidation; a miss stores only if its generation is unchanged.
        self._generations: Dict[TimelineKey, int] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_effective_rate(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        timeline_key = (plan_code, int_rate_type)
        cache_key = (plan_code, int_rate_type, base_date)
        with self._lock:
            if cache_key in self._entries:
                self._entries.move_to_end(cache_key)
                self.hits += 1
                return self._entries[cache_key]
            self.misses += 1
            generation = self._generations.get(timeline_key, 0)

        interval = self.inner.get_effective_rate(plan_code, int_rate_type, base_date)

        with self._lock:
            if self._generations.get(timeline_key, 0) != generation:
                logger.debug(
                    "Skipped caching %s/%s %s after concurrent invalidation",
                    plan_code,
                    int_rate_type,
                    base_date,
                )
                return interval
            self._entries[cache_key] = interval
            self._by_timeline.setdefault(timeline_key, set()).add(cache_key)
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._by_timeline.get(evicted[:2], set()).discard(evicted)
        return interval

    def find_by_base_date(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        return self.inner.find_by_base_date(plan_code, int_rate_type, base_date)

    def intervals(self, plan_code: str, int_rate_type: str) -> List[RateInterval]:
        return self.inner.intervals(plan_code, int_rate_type)

    def invalidate(self, plan_code: str, int_rate_type: str) -> int:
        """Drop cached lookups of one timeline; returns the number dropped."""
        with self._lock:
            key = (plan_code, int_rate_type)
            self._generations[key] = self._generations.get(key, 0) + 1
            cache_keys = self._by_timeline.pop(key, set())
            for cache_key in cache_keys:
                self._entries.pop(cache_key, None)
        if cache_keys:
            logger.debug(
                "Evicted %d cached lookups for %s/%s", len(cache_keys), plan_code, int_rate_type
            )
        return len(cache_keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._by_timeline.clear()

    def insert(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        rate: Decimal,
    ) -> RateInterval:
        try:
            return self.inner.insert(plan_code, int_rate_type, start_date, end_date, rate)
        finally:
            self.invalidate(plan_code, int_rate_type)

    def delete(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RateInterval:
        try:
            return self.inner.delete(plan_code, int_rate_type, start_date, end_date)
        finally:
            self.invalidate(plan_code, int_rate_type)

    def update_rate(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        new_rate: Decimal,
    ) -> int:
        try:
            return self.inner.update_rate(plan_code, int_rate_type, start_date, end_date, new_rate)
        finally:
            self.invalidate(plan_code, int_rate_type)

    def update_end_date(
        self, plan_code: str, int_rate_type: str, start_date: date, end_date: date
    ) -> int:
        try:
            return self.inner.update_end_date(plan_code, int_rate_type, start_date, end_date)
        finally:
            self.invalidate(plan_code, int_rate_type)

    def load_intervals(self, intervals: Iterable[RateInterval]) -> int:
        items = list(intervals)
        try:
            return self.inner.load_intervals(items)
        finally:
            for key in {item.key for item in items}:
                self.invalidate(*key)

    def __getattr__(self, name):
        # exists/count/keys and other read-only helpers of the wrapped timeline
        if name == "inner":
            raise AttributeError(name)
        return getattr(self.inner, name)
