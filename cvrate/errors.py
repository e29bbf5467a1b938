"""
Exception hierarchy for the rate engine.

Timeline conflicts and unsupported rate types are caller-level integrity
problems and are raised. Bad business data inside a calculation is not an
error: strategies answer it with the zero result instead.
"""

from typing import Iterable


class CvRateError(Exception):
    """Base class for all rate engine errors."""


class RateTimelineError(CvRateError, ValueError):
    """A rate timeline mutation could not be applied."""


class DuplicateRateIntervalError(RateTimelineError):
    """An interval with the same (plan, type, start date) already exists."""

    def __init__(self, plan_code: str, int_rate_type: str, start_date):
        self.plan_code = plan_code
        self.int_rate_type = int_rate_type
        self.start_date = start_date
        super().__init__(
            f"Rate interval already exists ({plan_code}/{int_rate_type}/{start_date})"
        )


class RateIntervalNotFoundError(RateTimelineError):
    """No interval matches the requested key."""

    def __init__(self, plan_code: str, int_rate_type: str, start_date):
        self.plan_code = plan_code
        self.int_rate_type = int_rate_type
        self.start_date = start_date
        super().__init__(
            f"Rate interval not found ({plan_code}/{int_rate_type}/{start_date})"
        )


class OverlappingRateIntervalError(RateTimelineError):
    """Seeded intervals overlap for the same (plan, type)."""


class UnsupportedRateTypeError(CvRateError, ValueError):
    """The dispatcher has no strategy for the requested rate type."""

    def __init__(self, rate_type, supported: Iterable[str]):
        self.rate_type = rate_type
        self.supported = sorted(supported)
        super().__init__(
            f"Unsupported rate_type: {rate_type!r}. "
            f"Supported rate_types: {self.supported}"
        )


class StrategyRegistrationError(CvRateError, ValueError):
    """Strategies do not cover every rate type exactly once."""
