"""Loan rate of the final month applied to the whole span."""

import logging
from decimal import Decimal
from typing import FrozenSet, Optional

from cvrate.schema.enums import IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult
from cvrate.utils.date import month_start, year_length
from cvrate.utils.daycount import INCLUSIVE, day_count
from cvrate.utils.mathutils import BASIS_POINTS, RATE_SCALE, divide, round_half_up

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class LastMonthRateStrategy(InterestRateStrategy):
    """
    Single rate snapshot at the end date's month start.

    Days are counted inclusively over the whole span and divided by the
    calendar length of the begin date's year. No monthly breakdown.
    """

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.LOAN_RATE_LAST_MONTH})

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
        year_days = year_length(begin)
        total_days = day_count(begin, end, INCLUSIVE)

        rate = self.rate_lookup.resolve_rate(
            calc_input, IntRateType.LOAN.value, month_start(end)
        ).adjusted_rate

        interest = Decimal("0")
        if calc_input.principal_amount != 0 and total_days > 0:
            interest = round_half_up(
                calc_input.principal_amount
                * divide(rate, BASIS_POINTS, RATE_SCALE)
                * divide(total_days, year_days, RATE_SCALE),
                output_scale,
            )

        logger.debug(
            "Last-month rate=%s days=%d year_days=%d interest=%s",
            rate,
            total_days,
            year_days,
            interest,
        )
        return CalculationResult(effective_rate=rate, interest_amount=interest)
