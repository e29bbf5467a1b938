"""
cvrate: interest rate calculation engine for insurance policy values.
"""

from .config import EngineSettings, configure_logging
from .errors import (
    CvRateError,
    DuplicateRateIntervalError,
    OverlappingRateIntervalError,
    RateIntervalNotFoundError,
    RateTimelineError,
    StrategyRegistrationError,
    UnsupportedRateTypeError,
)
from .factory import create_interest_rate_service, create_rate_timeline, create_strategies
from .interest import InterestRateService, RateLookup, RateStrategyDispatcher
from .schema import (
    CalculationInput,
    CalculationResult,
    InvestmentTarget,
    IntRateType,
    MonthlyPeriodDetail,
    PlanDefinition,
    PlanDetail,
    PlanNote,
    RateLookupResult,
    RateType,
    ZERO_RESULT,
)
from .timeline import (
    INFINITE_END_DATE,
    CachedRateTimeline,
    InMemoryRateTimeline,
    RateInterval,
)

__version__ = "0.1.0"

__all__ = [
    "EngineSettings",
    "configure_logging",
    "CvRateError",
    "DuplicateRateIntervalError",
    "OverlappingRateIntervalError",
    "RateIntervalNotFoundError",
    "RateTimelineError",
    "StrategyRegistrationError",
    "UnsupportedRateTypeError",
    "create_interest_rate_service",
    "create_rate_timeline",
    "create_strategies",
    "InterestRateService",
    "RateLookup",
    "RateStrategyDispatcher",
    "CalculationInput",
    "CalculationResult",
    "InvestmentTarget",
    "IntRateType",
    "MonthlyPeriodDetail",
    "PlanDefinition",
    "PlanDetail",
    "PlanNote",
    "RateLookupResult",
    "RateType",
    "ZERO_RESULT",
    "INFINITE_END_DATE",
    "CachedRateTimeline",
    "InMemoryRateTimeline",
    "RateInterval",
    "__version__",
]
