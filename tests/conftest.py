"""Shared fixtures: a seeded rate timeline and the wired strategies."""

from datetime import date
from decimal import Decimal

import pytest

from cvrate.config import EngineSettings
from cvrate.factory import create_interest_rate_service, create_strategies
from cvrate.interest.collaborators import (
    InMemoryInvestmentTargetSource,
    InMemoryPlanDetailSource,
)
from cvrate.interest.lookup import RateLookup
from cvrate.schema import InvestmentTarget, PlanDetail
from cvrate.timeline import INFINITE_END_DATE, InMemoryRateTimeline, RateInterval

PLAN = "SUB01"


def seed(timeline, plan_code, int_rate_type, rows):
    """rows: (start, end or None, rate)"""
    timeline.load_intervals(
        RateInterval(
            plan_code=plan_code,
            int_rate_type=int_rate_type,
            start_date=start,
            end_date=end or INFINITE_END_DATE,
            rate=Decimal(str(rate)),
        )
        for start, end, rate in rows
    )


@pytest.fixture
def timeline():
    return InMemoryRateTimeline()


@pytest.fixture
def rate_lookup(timeline):
    return RateLookup(timeline)


@pytest.fixture
def plan_details():
    return InMemoryPlanDetailSource([PlanDetail("ANN01", "1", "IV01")])


@pytest.fixture
def investment_targets():
    return InMemoryInvestmentTargetSource(
        [InvestmentTarget("IV01", int_apply_yr_ind="1", int_apply_yr=1)]
    )


@pytest.fixture
def strategies(timeline, plan_details, investment_targets):
    return {
        type(strategy).__name__: strategy
        for strategy in create_strategies(timeline, plan_details, investment_targets)
    }


@pytest.fixture
def service(timeline, plan_details, investment_targets):
    return create_interest_rate_service(
        timeline,
        plan_details,
        investment_targets,
        settings=EngineSettings(cache_enabled=False),
    )


@pytest.fixture
def year_2020():
    return date(2020, 1, 1), date(2020, 12, 31)
