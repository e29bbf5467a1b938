"""Interest-calculation rate: day-weighted ordinary rate, interest computed once."""

import logging
from decimal import Decimal
from typing import FrozenSet, List, Optional

from cvrate.interest.periods import calendar_month_periods
from cvrate.schema.enums import IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, month_span, year_length
from cvrate.utils.mathutils import BASIS_POINTS, RATE_SCALE, divide, round_half_up

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class InterestCalcRateStrategy(InterestRateStrategy):
    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.INTEREST_CALC_RATE})

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if self._span_invalid(calc_input, allow_equal=False):
            return CalculationResult.zero()

        begin, end = calc_input.begin_date, calc_input.end_date
        principal = calc_input.principal_amount
        year_days = year_length(begin)
        months = month_span(begin, end) + 1

        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []
        for period in calendar_month_periods(begin, end, months):
            # Adjusted rates only; the original rate is not tracked here.
            rate = self.rate_lookup.resolve_rate(
                calc_input, IntRateType.ORDINARY.value, period.rate_date
            ).adjusted_rate
            weighted_rate += rate * period.days
            total_days += period.days
            details.append(
                MonthlyPeriodDetail(
                    start_date=period.start_date,
                    end_date=period.end_date,
                    month=format_month(period.rate_date),
                    day_count=period.days,
                    original_rate=rate,
                    effective_rate=rate,
                    period_interest=Decimal("0"),
                    principal=principal,
                )
            )

        average_rate = self._weighted_average(weighted_rate, total_days)
        interest = Decimal("0")
        if principal != 0 and total_days > 0:
            interest = round_half_up(
                principal
                * divide(average_rate, BASIS_POINTS, RATE_SCALE)
                * divide(total_days, year_days, RATE_SCALE),
                output_scale,
            )

        logger.debug(
            "Interest-calc rate months=%d days=%d rate=%s interest=%s",
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
