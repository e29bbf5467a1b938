"""
Annuity rates.

The compound path multiplies monthly factors ``(1 + r/10000) ** (days / year_days)``
at POWER_SCALE digits and allocates interest by differencing cumulative
rounded amounts, so the monthly rows always sum to the total. The linear
path is the deposit calculation on corporate annuity rates.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import FrozenSet, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from cvrate.interest.collaborators import InvestmentTargetSource, PlanDetailSource
from cvrate.interest.lookup import RateLookup
from cvrate.interest.periods import rolling_month_periods
from cvrate.schema.enums import ANNUITY_INSURANCE_TYPES, IntRateType, RateType
from cvrate.schema.inputs import CalculationInput, RateLookupResult
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, months_covering, year_length
from cvrate.utils.mathutils import (
    BASIS_POINTS,
    POWER_SCALE,
    RATE_SCALE,
    decimal_pow,
    divide,
    round_half_up,
)

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

LINEAR_TAG = "Linear"
COMPOUND_TAG = "Compound"
APPLY_ISSUE_RATE = "1"


def policy_year(issue_date: date, on_date: date) -> int:
    """1-based policy year that ``on_date`` falls in."""
    return relativedelta(on_date, issue_date).years + 1


class AnnuityRateStrategy(InterestRateStrategy):
    def __init__(
        self,
        rate_lookup: RateLookup,
        plan_details: Optional[PlanDetailSource] = None,
        investment_targets: Optional[InvestmentTargetSource] = None,
    ):
        super().__init__(rate_lookup)
        self.plan_details = plan_details
        self.investment_targets = investment_targets

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.ANNUITY_RATE_D, RateType.COMPOUND_RATE})

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if self._span_invalid(calc_input, allow_equal=False):
            return CalculationResult.zero()
        if calc_input.rate_type == RateType.COMPOUND_RATE:
            return self._calculate_compound(calc_input, output_scale, plan)
        return self._calculate_linear(calc_input, output_scale)

    @staticmethod
    def _month_count(calc_input: CalculationInput) -> int:
        return months_covering(calc_input.begin_date, calc_input.end_date)

    def _calculate_linear(
        self, calc_input: CalculationInput, output_scale: int
    ) -> CalculationResult:
        begin, end = calc_input.begin_date, calc_input.end_date
        principal = calc_input.principal_amount
        year_days = year_length(begin)
        months = self._month_count(calc_input)

        total_interest = Decimal("0")
        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []

        for period in rolling_month_periods(begin, end, months):
            lookup = self.rate_lookup.lookup_rate(
                calc_input, IntRateType.CORPORATE_ANNUITY.value, period.rate_date
            )
            rate = lookup.adjusted_rate
            period_interest = self._simple_interest(
                principal, rate, period.days, year_days, output_scale
            )
            total_interest += period_interest
            weighted_rate += rate * period.days
            total_days += period.days
            details.append(
                MonthlyPeriodDetail(
                    start_date=period.start_date,
                    end_date=period.end_date,
                    month=format_month(period.start_date),
                    day_count=period.days,
                    original_rate=lookup.original_rate,
                    effective_rate=rate,
                    period_interest=period_interest,
                    principal=principal,
                    tag=LINEAR_TAG,
                )
            )

        average_rate = self._weighted_average(weighted_rate, total_days)
        logger.debug(
            "Linear annuity months=%d days=%d rate=%s interest=%s",
            months,
            total_days,
            average_rate,
            total_interest,
        )
        return CalculationResult(
            effective_rate=average_rate,
            interest_amount=total_interest,
            monthly_details=tuple(details),
        )

    def _issue_rate_terms(
        self, calc_input: CalculationInput, plan: PlanDefinition
    ) -> Optional[Tuple[str, int, RateLookupResult]]:
        """Apply-issue-rate indicator, year count and issue rate of an annuity plan."""
        if self.plan_details is None or self.investment_targets is None:
            logger.warning("Annuity plan %s has no plan-detail or target source", plan.plan_code)
            return None

        plan_details = self.plan_details.find_by_plan(plan.plan_code, plan.version)
        if not plan_details:
            logger.debug("No plan details for %s version %s", plan.plan_code, plan.version)
            return None

        iv_target_code = plan_details[0].iv_target_code
        target = self.investment_targets.get_by_target_code(iv_target_code)
        if target is None:
            logger.debug("No investment target %s", iv_target_code)
            return None

        issue_date = calc_input.policy_issue_date or calc_input.begin_date
        issue_rate = self.rate_lookup.lookup_rate(
            calc_input, IntRateType.DECLARED.value, issue_date
        )
        return target.int_apply_yr_ind or "0", target.int_apply_yr or 0, issue_rate

    def _calculate_compound(
        self,
        calc_input: CalculationInput,
        output_scale: int,
        plan: Optional[PlanDefinition],
    ) -> CalculationResult:
        apply_ind, apply_years, issue_rate = "0", 0, RateLookupResult.zero()
        if plan is not None and plan.insurance_type_3 in ANNUITY_INSURANCE_TYPES:
            terms = self._issue_rate_terms(calc_input, plan)
            if terms is None:
                return CalculationResult.zero()
            apply_ind, apply_years, issue_rate = terms

        begin, end = calc_input.begin_date, calc_input.end_date
        issue_date = calc_input.policy_issue_date or begin
        principal = calc_input.principal_amount
        months = self._month_count(calc_input)

        one = Decimal("1")
        cumulative_factor = one
        previous_interest = Decimal("0")
        details: List[MonthlyPeriodDetail] = []

        for period in rolling_month_periods(begin, end, months):
            if (
                apply_ind == APPLY_ISSUE_RATE
                and policy_year(issue_date, period.start_date) <= apply_years
            ):
                lookup = issue_rate
            else:
                lookup = self.rate_lookup.lookup_rate(
                    calc_input, IntRateType.DECLARED.value, period.rate_date
                )
            rate = lookup.adjusted_rate

            base = one + divide(rate, BASIS_POINTS, POWER_SCALE)
            exponent = divide(period.days, year_length(period.start_date), POWER_SCALE)
            factor = decimal_pow(base, exponent, POWER_SCALE)
            cumulative_factor = round_half_up(cumulative_factor * factor, POWER_SCALE)

            cumulative_interest = round_half_up(
                principal * (cumulative_factor - one), output_scale
            )
            details.append(
                MonthlyPeriodDetail(
                    start_date=period.start_date,
                    end_date=period.end_date,
                    month=format_month(period.start_date),
                    day_count=period.days,
                    original_rate=lookup.original_rate,
                    effective_rate=rate,
                    period_interest=cumulative_interest - previous_interest,
                    principal=principal,
                    compound_factor=factor,
                    tag=COMPOUND_TAG,
                )
            )
            previous_interest = cumulative_interest

        compound_rate = round_half_up((cumulative_factor - one) * BASIS_POINTS, RATE_SCALE)
        logger.debug(
            "Compound annuity months=%d factor=%s rate=%s interest=%s",
            months,
            cumulative_factor,
            compound_rate,
            previous_interest,
        )
        return CalculationResult(
            effective_rate=compound_rate,
            interest_amount=previous_interest,
            monthly_details=tuple(details),
        )
