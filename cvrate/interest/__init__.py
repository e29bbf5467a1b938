"""Rate calculation: lookups, period generation, strategies and dispatch."""

from .collaborators import (
    InMemoryInvestmentTargetSource,
    InMemoryPlanDetailSource,
    InvestmentTargetSource,
    PlanDetailSource,
)
from .dispatcher import RateStrategyDispatcher
from .lookup import RateLookup, apply_discounts
from .periods import Period
from .service import InterestRateService

__all__ = [
    "InMemoryInvestmentTargetSource",
    "InMemoryPlanDetailSource",
    "InvestmentTargetSource",
    "PlanDetailSource",
    "RateStrategyDispatcher",
    "RateLookup",
    "apply_discounts",
    "Period",
    "InterestRateService",
]
