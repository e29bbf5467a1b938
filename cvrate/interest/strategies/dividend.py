"""Dividend rate: simple average of monthly rates, no interest amount."""

import logging
from decimal import Decimal
from typing import FrozenSet, Optional

from cvrate.interest.periods import month_steps
from cvrate.schema.enums import InsuranceType3, IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult
from cvrate.utils.date import months_covering
from cvrate.utils.mathutils import RATE_SCALE, divide

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class DividendRateStrategy(InterestRateStrategy):
    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.DIVIDEND_RATE})

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if self._span_invalid(calc_input, allow_equal=True):
            return CalculationResult.zero()

        # Variable annuity plans read declared rates instead of ordinary ones.
        if plan is not None and plan.insurance_type_3 == InsuranceType3.VARIABLE_ANNUITY:
            int_rate_type = IntRateType.DECLARED.value
        else:
            int_rate_type = IntRateType.ORDINARY.value

        months = months_covering(calc_input.begin_date, calc_input.end_date)

        total_rate = Decimal("0")
        for rate_date in month_steps(calc_input.begin_date, months):
            rate = self.rate_lookup.resolve_rate(calc_input, int_rate_type, rate_date)
            total_rate += rate.adjusted_rate

        average_rate = divide(total_rate, months, RATE_SCALE)
        logger.debug(
            "Dividend rate type=%s months=%d total=%s average=%s",
            int_rate_type,
            months,
            total_rate,
            average_rate,
        )
        return CalculationResult(effective_rate=average_rate, interest_amount=Decimal("0"))
