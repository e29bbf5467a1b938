"""
Factory functions wiring timelines, strategies and the service.
"""

from typing import Optional

from .config import EngineSettings
from .interest.collaborators import InvestmentTargetSource, PlanDetailSource
from .interest.dispatcher import RateStrategyDispatcher
from .interest.lookup import RateLookup
from .interest.service import InterestRateService
from .interest.strategies import (
    AnnuityRateStrategy,
    AvgDeclaredRateStrategy,
    DepositRateStrategy,
    DividendRateStrategy,
    FourBankRateStrategy,
    FreeLookRateStrategy,
    InterestCalcRateStrategy,
    LastMonthRateStrategy,
    LoanRateStrategy,
)
from .timeline.base import BaseRateTimeline
from .timeline.cache import CachedRateTimeline
from .timeline.store import InMemoryRateTimeline


def create_rate_timeline(settings: Optional[EngineSettings] = None) -> BaseRateTimeline:
    """
    Create an empty in-memory timeline, cached when the settings ask for it.

    Args:
        settings: Engine settings (read from the environment when None)

    Returns:
        Rate timeline

    Examples:
        >>> timeline = create_rate_timeline(EngineSettings(cache_enabled=False))
        >>> timeline.insert("P1", "2", date(2020, 1, 1), None, Decimal("250"))
    """
    settings = settings or EngineSettings.from_env()
    timeline = InMemoryRateTimeline()
    if settings.cache_enabled:
        return CachedRateTimeline(timeline, max_size=settings.cache_max_size)
    return timeline


def create_strategies(
    timeline: BaseRateTimeline,
    plan_details: Optional[PlanDetailSource] = None,
    investment_targets: Optional[InvestmentTargetSource] = None,
):
    """The nine calculation strategies sharing one rate lookup."""
    rate_lookup = RateLookup(timeline)
    annuity = AnnuityRateStrategy(rate_lookup, plan_details, investment_targets)
    return [
        DividendRateStrategy(rate_lookup),
        InterestCalcRateStrategy(rate_lookup),
        LoanRateStrategy(rate_lookup),
        LastMonthRateStrategy(rate_lookup),
        FourBankRateStrategy(rate_lookup),
        AvgDeclaredRateStrategy(rate_lookup),
        FreeLookRateStrategy(rate_lookup),
        DepositRateStrategy(rate_lookup, annuity),
        annuity,
    ]


def create_interest_rate_service(
    timeline: Optional[BaseRateTimeline] = None,
    plan_details: Optional[PlanDetailSource] = None,
    investment_targets: Optional[InvestmentTargetSource] = None,
    settings: Optional[EngineSettings] = None,
) -> InterestRateService:
    """
    Create the calculation service.

    Args:
        timeline: Rate timeline (a new one from ``create_rate_timeline`` when None)
        plan_details: Plan-detail source for compound annuity rates
        investment_targets: Investment-target source for compound annuity rates
        settings: Engine settings (read from the environment when None)

    Returns:
        Configured service
    """
    settings = settings or EngineSettings.from_env()
    if timeline is None:
        timeline = create_rate_timeline(settings)
    dispatcher = RateStrategyDispatcher(
        create_strategies(timeline, plan_details, investment_targets)
    )
    return InterestRateService(dispatcher, default_scale=settings.default_scale)
