"""Average declared rate over the twelve months preceding the end date."""

import logging
from decimal import Decimal
from typing import FrozenSet, Optional

from cvrate.interest.periods import trailing_month_starts
from cvrate.schema.enums import IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult
from cvrate.utils.mathutils import RATE_SCALE, divide

from .base import InterestRateStrategy

logger = logging.getLogger(__name__)

TRAILING_MONTHS = 12


class AvgDeclaredRateStrategy(InterestRateStrategy):
    """
    Trailing twelve-month average of declared rates.

    The begin date, the known rate and the subtraction/discount adjustments
    are all ignored: the average is taken over original timeline rates.
    """

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.AVG_DECLARED_RATE})

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if not calc_input.has_span:
            return CalculationResult.zero()

        total_rate = Decimal("0")
        for rate_date in trailing_month_starts(calc_input.end_date, TRAILING_MONTHS):
            lookup = self.rate_lookup.lookup_rate(
                calc_input, IntRateType.DECLARED.value, rate_date
            )
            total_rate += lookup.original_rate

        average_rate = divide(total_rate, TRAILING_MONTHS, RATE_SCALE)
        logger.debug("Average declared rate total=%s average=%s", total_rate, average_rate)
        return CalculationResult(effective_rate=average_rate, interest_amount=Decimal("0"))
