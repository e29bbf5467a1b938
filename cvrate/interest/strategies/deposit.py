"""
Deposit rate.

Each month's interest is rounded to the output scale before it is summed;
compare the loan strategy, which rounds only the total.
"""

import logging
from decimal import Decimal
from typing import FrozenSet, List, Optional

from cvrate.interest.periods import rolling_month_periods
from cvrate.schema.enums import ANNUITY_INSURANCE_TYPES, IntRateType, RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult, MonthlyPeriodDetail
from cvrate.utils.date import format_month, months_covering, year_length
from cvrate.utils.mathutils import calc_round

from .annuity import AnnuityRateStrategy
from .base import InterestRateStrategy

logger = logging.getLogger(__name__)


class DepositRateStrategy(InterestRateStrategy):
    def __init__(self, rate_lookup, annuity_strategy: AnnuityRateStrategy):
        super().__init__(rate_lookup)
        self.annuity_strategy = annuity_strategy

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset({RateType.DEPOSIT_RATE})

    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        if plan is not None and plan.insurance_type_3 in ANNUITY_INSURANCE_TYPES:
            logger.debug(
                "Deposit rate for annuity plan %s routed to annuity strategy", plan.plan_code
            )
            return self.annuity_strategy.calculate(calc_input, output_scale, plan, plan_note)

        if self._span_invalid(calc_input, allow_equal=False):
            return CalculationResult.zero()

        begin, end = calc_input.begin_date, calc_input.end_date
        principal = calc_input.principal_amount
        year_days = year_length(begin)
        months = months_covering(begin, end)

        total_interest = Decimal("0")
        weighted_rate = Decimal("0")
        total_days = 0
        details: List[MonthlyPeriodDetail] = []

        for period in rolling_month_periods(begin, end, months):
            lookup = self.rate_lookup.lookup_rate(
                calc_input, IntRateType.DECLARED.value, period.rate_date
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
                )
            )

        effective_rate = calc_round(self._weighted_average(weighted_rate, total_days))
        logger.debug(
            "Deposit rate months=%d days=%d rate=%s interest=%s",
            months,
            total_days,
            effective_rate,
            total_interest,
        )
        return CalculationResult(
            effective_rate=effective_rate,
            interest_amount=total_interest,
            monthly_details=tuple(details),
        )
