"""
Monthly loan rate.

Interest accumulates unrounded across the months and is rounded once at
the end; compare the deposit strategy, which rounds every month.
"""

import logging
from decimal import Decimal
from typing import FrozenSet, List, Optional

from cvrate.interest.lookup import apply_discounts
from cvrate.interest.periods import snapped_month_periods
from cvrate.schema.enums import IntRateType, RateType
from cvrate.schema.inputs import CalculationInput, RateLookupResult
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, month_span, year_length
from cvrate.utils.mathutils import (
    BASIS_POINTS,
    RATE_SCALE,
    calc_round,
    divide,
    round_half_up,
)

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class LoanRateStrategy(InterestRateStrategy):
    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.LOAN_RATE_MONTHLY, RateType.LOAN_RATE_MONTHLY_V2})

    def _period_rate(self, calc_input: CalculationInput, rate_date) -> RateLookupResult:
        if calc_input.has_known_rate:
            # Known loan rates still take the caller's subtraction and discount.
            known = calc_input.known_rate
            adjusted = apply_discounts(
                known, calc_input.rate_subtraction, calc_input.rate_discount_percent
            )
            return RateLookupResult(known, adjusted)
        return self.rate_lookup.lookup_rate(calc_input, IntRateType.LOAN.value, rate_date)

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if self._span_invalid(calc_input, allow_equal=True):
            return CalculationResult.zero()

        begin, end = calc_input.begin_date, calc_input.end_date
        principal = calc_input.principal_amount
        year_days = year_length(begin)
        months = month_span(begin, end) + 1

        total_interest = Decimal("0")
        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []

        for period in snapped_month_periods(begin, end, months):
            lookup = self._period_rate(calc_input, period.rate_date)
            # Negative rates (subtraction larger than the rate) accrue nothing.
            rate = max(lookup.adjusted_rate, Decimal("0"))

            period_interest = (
                principal
                * divide(rate, BASIS_POINTS, RATE_SCALE)
                * divide(period.days, year_days, RATE_SCALE)
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
                )
            )

        effective_rate = calc_round(self._weighted_average(weighted_rate, total_days))
        interest = round_half_up(total_interest, output_scale)
        logger.debug(
            "Loan rate months=%d days=%d rate=%s interest=%s",
            months,
            total_days,
            effective_rate,
            interest,
        )
        return CalculationResult(
            effective_rate=effective_rate,
            interest_amount=interest,
            monthly_details=tuple(details),
        )
