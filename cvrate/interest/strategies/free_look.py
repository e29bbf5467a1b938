"""Free-look (grace period) interest at the begin month's single rate."""

import logging
from decimal import Decimal
from typing import FrozenSet, List, Optional

from cvrate.interest.periods import rolling_month_periods
from cvrate.schema.enums import FREE_LOOK_RATE_TYPES, IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, month_span, month_start, year_length

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class FreeLookRateStrategy(InterestRateStrategy):
    """
    One rate, looked up at the begin date's month start, over the whole span.

    The sub-account defaults to the plan note's free-look rate code. The
    monthly loop only accumulates days; interest is computed once from the
    day-weighted average.
    """

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return FREE_LOOK_RATE_TYPES

    @staticmethod
    def int_rate_type_for(rate_type) -> str:
        if rate_type == RateType.FREE_LOOK_E:
            return IntRateType.INVESTMENT_YIELD.value
        return IntRateType.FREE_LOOK.value

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if self._span_invalid(calc_input, allow_equal=False):
            return CalculationResult.zero()

        plan_code = calc_input.sub_account_plan_code
        if plan_code is None and plan_note is not None:
            plan_code = plan_note.free_look_rate_code
        if plan_code is None:
            logger.debug("No sub-account plan code or free-look rate code")
            return CalculationResult.zero()
        calc_input = calc_input.with_plan_code(plan_code)

        int_rate_type = self.int_rate_type_for(calc_input.rate_type)
        begin, end = calc_input.begin_date, calc_input.end_date
        lookup = self.rate_lookup.lookup_rate(calc_input, int_rate_type, month_start(begin))
        if lookup.adjusted_rate == 0:
            logger.debug("No free-look rate for %s type=%s", plan_code, int_rate_type)
            return CalculationResult.zero()

        principal = calc_input.principal_amount
        rate = lookup.adjusted_rate
        year_days = year_length(begin)
        months = month_span(begin, end) + 1

        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []
        for period in rolling_month_periods(begin, end, months):
            # The unconditional extra month starts past the end date and counts negative days.
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
                    period_interest=Decimal("0"),
                    principal=principal,
                )
            )

        average_rate = self._weighted_average(weighted_rate, total_days)
        interest = self._simple_interest(
            principal, average_rate, total_days, year_days, output_scale
        )
        logger.debug(
            "Free-look type=%s months=%d days=%d rate=%s interest=%s",
            int_rate_type,
            months,
            total_days,
            average_rate,
            interest,
        )
        return CalculationResult(
            effective_rate=average_rate,
            interest_amount=interest,
            monthly_details=tuple(details),
        )
