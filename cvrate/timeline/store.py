"""
In-memory rate timeline.

Readers see immutable per-key snapshots and never block; writers replace a
key's snapshot while holding that key's lock.
"""

import bisect
import logging
import threading
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from cvrate.errors import (
    DuplicateRateIntervalError,
    OverlappingRateIntervalError,
    RateIntervalNotFoundError,
)
from cvrate.utils.date import to_date
from cvrate.utils.mathutils import to_decimal

from .base import BaseRateTimeline
from .interval import INFINITE_END_DATE, RateInterval, TimelineKey

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


class _Snapshot(NamedTuple):
    intervals: Tuple[RateInterval, ...]
    starts: Tuple[date, ...]


_EMPTY = _Snapshot((), ())


class InMemoryRateTimeline(BaseRateTimeline):
    """Rate timeline held in process memory."""

    def __init__(self):
        self._timelines: Dict[TimelineKey, _Snapshot] = {}
        self._locks: Dict[TimelineKey, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: TimelineKey) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _snapshot(self, key: TimelineKey) -> Tuple[RateInterval, ...]:
        return self._timelines.get(key, _EMPTY).intervals

    def _publish(self, key: TimelineKey, intervals: List[RateInterval]) -> None:
        # Caller holds the key lock. Intervals and starts are swapped in together.
        self._timelines[key] = _Snapshot(
            tuple(intervals), tuple(interval.start_date for interval in intervals)
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_by_base_date(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        snapshot = self._timelines.get((plan_code, int_rate_type), _EMPTY)
        idx = bisect.bisect_right(snapshot.starts, base_date) - 1
        if idx >= 0 and snapshot.intervals[idx].contains(base_date):
            return snapshot.intervals[idx]
        return None

    def find_max_before_date(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        """Interval with the latest start date on or before ``base_date``."""
        snapshot = self._timelines.get((plan_code, int_rate_type), _EMPTY)
        idx = bisect.bisect_right(snapshot.starts, base_date) - 1
        return snapshot.intervals[idx] if idx >= 0 else None

    def get_effective_rate(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        interval = self.find_by_base_date(plan_code, int_rate_type, base_date)
        if interval is None:
            interval = self.find_max_before_date(plan_code, int_rate_type, base_date)
        logger.debug(
            "Effective rate plan=%s type=%s date=%s -> %s",
            plan_code,
            int_rate_type,
            base_date,
            None if interval is None else interval.rate,
        )
        return interval

    def intervals(self, plan_code: str, int_rate_type: str) -> List[RateInterval]:
        return list(self._snapshot((plan_code, int_rate_type)))

    def exists(self, plan_code: str, int_rate_type: str, start_date: date) -> bool:
        snapshot = self._snapshot((plan_code, int_rate_type))
        return any(interval.start_date == start_date for interval in snapshot)

    def count(self, plan_code: str, int_rate_type: Optional[str] = None) -> int:
        return sum(
            len(snapshot.intervals)
            for (plan, rate_type), snapshot in list(self._timelines.items())
            if plan == plan_code and (int_rate_type is None or rate_type == int_rate_type)
        )

    def keys(self) -> List[TimelineKey]:
        return sorted(
            key for key, snapshot in list(self._timelines.items()) if snapshot.intervals
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        rate: Decimal,
    ) -> RateInterval:
        """
        Add an interval, truncating the current latest interval when needed.

        When ``start_date`` is after the latest interval's start, that
        interval now ends the day before ``start_date`` and the new interval
        becomes the open-ended latest one.

        Raises:
            DuplicateRateIntervalError: An interval already starts on ``start_date``
        """
        key = (plan_code, int_rate_type)
        start_date = to_date(start_date)
        with self._lock_for(key):
            snapshot = list(self._snapshot(key))
            if any(interval.start_date == start_date for interval in snapshot):
                raise DuplicateRateIntervalError(plan_code, int_rate_type, start_date)

            latest = snapshot[-1] if snapshot else None
            if latest is None or start_date > latest.start_date:
                if latest is not None:
                    snapshot[-1] = replace(latest, end_date=start_date - _ONE_DAY)
                    logger.info(
                        "Truncated %s/%s interval %s to end %s",
                        plan_code,
                        int_rate_type,
                        latest.start_date,
                        start_date - _ONE_DAY,
                    )
                new_end = INFINITE_END_DATE
            else:
                new_end = INFINITE_END_DATE if end_date is None else to_date(end_date)

            interval = RateInterval(
                plan_code=plan_code,
                int_rate_type=int_rate_type,
                start_date=start_date,
                end_date=new_end,
                rate=to_decimal(rate),
            )
            idx = bisect.bisect_right([item.start_date for item in snapshot], start_date)
            snapshot.insert(idx, interval)
            self._publish(key, snapshot)

        logger.info(
            "Inserted rate interval %s/%s %s..%s rate=%s",
            plan_code,
            int_rate_type,
            interval.start_date,
            interval.end_date,
            interval.rate,
        )
        return interval

    def delete(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RateInterval:
        """
        Remove an interval; reopen the new latest interval when the removed one had no successor.

        ``end_date`` must equal the stored end date, or the stored end must
        be the open-ended sentinel (inserts normalize the latest interval's end).

        Raises:
            RateIntervalNotFoundError: No interval matches the key
        """
        key = (plan_code, int_rate_type)
        start_date = to_date(start_date)
        with self._lock_for(key):
            snapshot = list(self._snapshot(key))
            idx = self._match_index(snapshot, start_date, end_date)
            if idx is None:
                raise RateIntervalNotFoundError(plan_code, int_rate_type, start_date)
            removed = snapshot.pop(idx)

            has_successor = any(item.start_date >= start_date for item in snapshot)
            if not has_successor and snapshot:
                latest = snapshot[-1]
                snapshot[-1] = replace(latest, end_date=INFINITE_END_DATE)
                logger.info(
                    "Reopened %s/%s interval %s as latest",
                    plan_code,
                    int_rate_type,
                    latest.start_date,
                )
            self._publish(key, snapshot)

        logger.info(
            "Deleted rate interval %s/%s %s..%s",
            plan_code,
            int_rate_type,
            removed.start_date,
            removed.end_date,
        )
        return removed

    def update_rate(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        new_rate: Decimal,
    ) -> int:
        """Replace the rate of one interval; returns the number of intervals changed."""
        key = (plan_code, int_rate_type)
        start_date = to_date(start_date)
        with self._lock_for(key):
            snapshot = list(self._snapshot(key))
            idx = self._match_index(snapshot, start_date, end_date)
            if idx is None:
                return 0
            snapshot[idx] = replace(snapshot[idx], rate=to_decimal(new_rate))
            self._publish(key, snapshot)
        logger.info(
            "Updated rate %s/%s %s -> %s", plan_code, int_rate_type, start_date, new_rate
        )
        return 1

    def update_end_date(
        self, plan_code: str, int_rate_type: str, start_date: date, end_date: date
    ) -> int:
        """Replace the end date of one interval; returns the number of intervals changed."""
        key = (plan_code, int_rate_type)
        start_date = to_date(start_date)
        with self._lock_for(key):
            snapshot = list(self._snapshot(key))
            idx = self._match_index(snapshot, start_date, None)
            if idx is None:
                return 0
            snapshot[idx] = replace(snapshot[idx], end_date=to_date(end_date))
            self._publish(key, snapshot)
        logger.info(
            "Updated end date %s/%s %s -> %s", plan_code, int_rate_type, start_date, end_date
        )
        return 1

    def load_intervals(self, intervals: Iterable[RateInterval]) -> int:
        """
        Seed intervals as given, without boundary re-stitching.

        Raises:
            DuplicateRateIntervalError: Two intervals share a start date
            OverlappingRateIntervalError: Two intervals of one timeline overlap
        """
        grouped: Dict[TimelineKey, List[RateInterval]] = {}
        for interval in intervals:
            grouped.setdefault(interval.key, []).append(interval)

        loaded = 0
        for key, new_items in grouped.items():
            with self._lock_for(key):
                merged = sorted(
                    list(self._snapshot(key)) + new_items, key=lambda item: item.start_date
                )
                for prev, curr in zip(merged, merged[1:]):
                    if prev.start_date == curr.start_date:
                        raise DuplicateRateIntervalError(key[0], key[1], curr.start_date)
                    if prev.end_date >= curr.start_date:
                        raise OverlappingRateIntervalError(
                            f"Intervals {prev.start_date}..{prev.end_date} and "
                            f"{curr.start_date}..{curr.end_date} overlap for {key[0]}/{key[1]}"
                        )
                self._publish(key, merged)
            loaded += len(new_items)
        logger.info("Loaded %d rate intervals across %d timelines", loaded, len(grouped))
        return loaded

    @staticmethod
    def _match_index(
        snapshot: List[RateInterval], start_date: date, end_date: Optional[date]
    ) -> Optional[int]:
        for idx, interval in enumerate(snapshot):
            if interval.start_date != start_date:
                continue
            if end_date is None:
                return idx
            end = to_date(end_date)
            if interval.end_date == end or interval.is_open_ended:
                return idx
            return None
        return None
