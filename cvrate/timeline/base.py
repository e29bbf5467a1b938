"""
Base abstractions for rate timelines.

Strategies depend only on the lookup half of the protocol; the mutation
half is used by administrative rate maintenance.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol, runtime_checkable

from .interval import RateInterval


@runtime_checkable
class RateSource(Protocol):
    """
    Protocol for point lookups against a rate timeline.
    """

    def get_effective_rate(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        """
        Interval containing ``base_date``, else the latest one starting on or before it.

        Args:
            plan_code: Sub-account plan code
            int_rate_type: Timeline rate-type key
            base_date: Date to look up

        Returns:
            Matching interval, or None when the timeline has nothing on or before the date
        """
        ...

    def find_by_base_date(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        """Interval containing ``base_date`` (no fallback)."""
        ...


class BaseRateTimeline(ABC):
    """
    Abstract base class for rate timelines.

    Concrete timelines keep, per (plan code, rate type), intervals that do
    not overlap and that are contiguous except for the open-ended latest one.
    """

    def lookup(self, plan_code: str, int_rate_type: str, base_date: date) -> Optional[Decimal]:
        """Rate in effect at ``base_date`` with backward fallback."""
        interval = self.get_effective_rate(plan_code, int_rate_type, base_date)
        return None if interval is None else interval.rate

    @abstractmethod
    def get_effective_rate(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        pass

    @abstractmethod
    def find_by_base_date(
        self, plan_code: str, int_rate_type: str, base_date: date
    ) -> Optional[RateInterval]:
        pass

    @abstractmethod
    def intervals(self, plan_code: str, int_rate_type: str) -> List[RateInterval]:
        """Snapshot of one timeline ordered by start date."""
        pass

    @abstractmethod
    def insert(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        rate: Decimal,
    ) -> RateInterval:
        pass

    @abstractmethod
    def delete(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RateInterval:
        pass

    @abstractmethod
    def update_rate(
        self,
        plan_code: str,
        int_rate_type: str,
        start_date: date,
        end_date: Optional[date],
        new_rate: Decimal,
    ) -> int:
        pass

    @abstractmethod
    def update_end_date(
        self, plan_code: str, int_rate_type: str, start_date: date, end_date: date
    ) -> int:
        pass
