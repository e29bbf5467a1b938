"""Rate interval records held by the rate timeline."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Tuple

# End date carried by the open-ended (latest) interval of a timeline.
INFINITE_END_DATE = date(9999, 12, 31)

TimelineKey = Tuple[str, str]


@dataclass(frozen=True)
class RateInterval:
    """A dated rate for one (plan code, rate type) timeline.

    Attributes:
        plan_code: Sub-account plan code
        int_rate_type: Timeline rate-type key
        start_date: First day the rate applies
        end_date: Last day the rate applies (INFINITE_END_DATE when open-ended)
        rate: Rate in hundredths of a percent
    """

    plan_code: str
    int_rate_type: str
    start_date: date
    end_date: date
    rate: Decimal

    @property
    def key(self) -> TimelineKey:
        return (self.plan_code, self.int_rate_type)

    @property
    def is_open_ended(self) -> bool:
        return self.end_date == INFINITE_END_DATE

    def contains(self, dt: date) -> bool:
        return self.start_date <= dt <= self.end_date
