"""
Four-reference-bank rate.

Two rates run through the same monthly loop: interest accrues at the loan
rate, while the reported effective rate is the day-weighted average of the
four-bank rates looked up month by month.
"""

import logging
from decimal import Decimal
from typing import FrozenSet, List, Optional

from cvrate.interest.periods import snapped_month_periods
from cvrate.schema.enums import IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, month_span, month_start, year_length
from cvrate.utils.mathutils import (
    BASIS_POINTS,
    RATE_SCALE,
    calc_round,
    divide,
    round_half_up,
    to_decimal,
)

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

MAX_MONTHS = 120


class FourBankRateStrategy(InterestRateStrategy):
    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.FOUR_BANK_RATE})

    def resolve_loan_rate(
        self, calc_input: CalculationInput, loan_rate: Optional[Decimal] = None
    ) -> Decimal:
        """
        Rate that interest accrues at.

        An explicit ``loan_rate`` wins, even when zero. Otherwise the caller's
        known rate, and failing that the adjusted loan rate at the begin
        date's month start.
        """
        if loan_rate is not None:
            return to_decimal(loan_rate)
        if calc_input.has_known_rate:
            return calc_input.known_rate
        return self.rate_lookup.lookup_rate(
            calc_input, IntRateType.LOAN.value, month_start(calc_input.begin_date)
        ).adjusted_rate

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
        loan_rate: Optional[Decimal] = None,
    ) -> CalculationResult:
        """
        Calculate four-bank interest.

        Args:
            calc_input: Calculation input
            output_scale: Fractional digits of the interest amount
            plan: Unused
            plan_note: Unused
            loan_rate: Effective rate of the monthly loan calculation over the
                same input; see :meth:`resolve_loan_rate` when omitted

        Returns:
            Calculation result with one row per month
        """
        if self._span_invalid(calc_input, allow_equal=True):
            return CalculationResult.zero()

        begin, end = calc_input.begin_date, calc_input.end_date
        principal = calc_input.principal_amount
        year_days = year_length(begin)
        months = min(month_span(begin, end) + 1, MAX_MONTHS)

        accrual_rate = self.resolve_loan_rate(calc_input, loan_rate)
        accrual_fraction = divide(accrual_rate, BASIS_POINTS, RATE_SCALE)

        total_interest = Decimal("0")
        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []

        for period in snapped_month_periods(begin, end, months):
            four_bank = self.rate_lookup.lookup_rate(
                calc_input, IntRateType.ORDINARY.value, period.rate_date
            )
            period_interest = round_half_up(
                principal * accrual_fraction * divide(period.days, year_days, RATE_SCALE),
                output_scale,
            )
            total_interest += period_interest
            weighted_rate += four_bank.adjusted_rate * period.days
            total_days += period.days

            details.append(
                MonthlyPeriodDetail(
                    start_date=period.start_date,
                    end_date=period.end_date,
                    month=format_month(period.rate_date),
                    day_count=period.days,
                    original_rate=four_bank.original_rate,
                    effective_rate=accrual_rate,
                    period_interest=period_interest,
                    principal=principal,
                )
            )

        effective_rate = calc_round(self._weighted_average(weighted_rate, total_days))
        logger.debug(
            "Four-bank rate months=%d days=%d loan_rate=%s four_bank=%s interest=%s",
            months,
            total_days,
            accrual_rate,
            effective_rate,
            total_interest,
        )
        return CalculationResult(
            effective_rate=effective_rate,
            interest_amount=total_interest,
            monthly_details=tuple(details),
        )
