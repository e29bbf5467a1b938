"""
Value objects exchanged between the dispatcher, strategies and callers.
"""

from .enums import (
    ANNUITY_INSURANCE_TYPES,
    FREE_LOOK_RATE_TYPES,
    INVESTMENT_INSURANCE_TYPES,
    INVESTMENT_ONLY_RATE_TYPES,
    InsuranceType3,
    IntRateType,
    RateType,
)
from .inputs import CalculationInput, RateLookupResult
from .plans import InvestmentTarget, PlanDefinition, PlanDetail, PlanNote
from .results import ZERO_RESULT, CalculationResult, MonthlyPeriodDetail

__all__ = [
    "RateType",
    "IntRateType",
    "InsuranceType3",
    "INVESTMENT_INSURANCE_TYPES",
    "ANNUITY_INSURANCE_TYPES",
    "INVESTMENT_ONLY_RATE_TYPES",
    "FREE_LOOK_RATE_TYPES",
    "CalculationInput",
    "RateLookupResult",
    "CalculationResult",
    "MonthlyPeriodDetail",
    "ZERO_RESULT",
    "PlanDefinition",
    "PlanNote",
    "PlanDetail",
    "InvestmentTarget",
]
