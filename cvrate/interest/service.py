"""
Single entry point for rate calculations.

The service validates the rate type, applies the plan-level routing gates
and calls the strategy. For four-bank rates it runs the monthly loan
calculation first and hands its effective rate to the four-bank strategy.
"""

import logging
from typing import FrozenSet, Iterable, List, Optional

from cvrate.errors import UnsupportedRateTypeError
from cvrate.schema.enums import (
    INVESTMENT_INSURANCE_TYPES,
    INVESTMENT_ONLY_RATE_TYPES,
    InsuranceType3,
    RateType,
)
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult

from .dispatcher import RateStrategyDispatcher

logger = logging.getLogger(__name__)


class InterestRateService:
    def __init__(self, dispatcher: RateStrategyDispatcher, default_scale: int = 0):
        self.dispatcher = dispatcher
        self.default_scale = default_scale

    def calculate_rate(
        self,
        calc_input: CalculationInput,
        output_scale: Optional[int] = None,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        """
        Calculate the effective rate and interest of one input.

        Args:
            calc_input: Calculation input
            output_scale: Fractional digits of the interest amount (service default when None)
            plan: Plan definition used by the routing gates and strategies
            plan_note: Plan note supplying the free-look default sub-account

        Returns:
            Calculation result

        Raises:
            ValueError: The input carries no rate type
            UnsupportedRateTypeError: The rate type code is unknown
        """
        if output_scale is None:
            output_scale = self.default_scale

        rate_type = calc_input.rate_type
        if rate_type is None:
            raise ValueError("rate_type must not be None")
        if not isinstance(rate_type, RateType) or not self.dispatcher.supports(rate_type):
            raise UnsupportedRateTypeError(
                rate_type, [known.code for known in self.dispatcher.supported_rate_types()]
            )

        if calc_input.has_span and calc_input.begin_date > calc_input.end_date:
            logger.debug(
                "Inverted span %s > %s, returning zero",
                calc_input.begin_date,
                calc_input.end_date,
            )
            return CalculationResult.zero()

        effective_type = self._resolve_investment_gate(rate_type, plan)
        effective_type = self._resolve_declared_gate(effective_type, plan)
        if effective_type != rate_type:
            calc_input = calc_input.with_rate_type(effective_type)

        logger.debug(
            "Calculating rate_type=%s span=%s..%s scale=%d plan=%s",
            effective_type.code,
            calc_input.begin_date,
            calc_input.end_date,
            output_scale,
            None if plan is None else plan.plan_code,
        )

        if effective_type == RateType.FOUR_BANK_RATE:
            result = self._calculate_four_bank(calc_input, output_scale, plan, plan_note)
        else:
            strategy = self.dispatcher.dispatch(effective_type)
            result = strategy.calculate(calc_input, output_scale, plan, plan_note)

        logger.debug(
            "Calculated rate=%s interest=%s details=%d",
            result.effective_rate,
            result.interest_amount,
            len(result.monthly_details),
        )
        return result

    def _calculate_four_bank(
        self,
        calc_input: CalculationInput,
        output_scale: int,
        plan: Optional[PlanDefinition],
        plan_note: Optional[PlanNote],
    ) -> CalculationResult:
        # Four-bank interest accrues at the monthly loan rate of the same input,
        # so the loan calculation has to run first.
        loan = self.dispatcher.dispatch(RateType.LOAN_RATE_MONTHLY).calculate(
            calc_input.with_rate_type(RateType.LOAN_RATE_MONTHLY), output_scale, plan, plan_note
        )
        four_bank = self.dispatcher.dispatch(RateType.FOUR_BANK_RATE)
        return four_bank.calculate(
            calc_input, output_scale, plan, plan_note, loan_rate=loan.effective_rate
        )

    def calculate_rate_batch(
        self, inputs: Iterable[CalculationInput], output_scale: Optional[int] = None
    ) -> List[CalculationResult]:
        """Calculate each input; an input that fails yields the zero result."""
        results = []
        for calc_input in inputs:
            try:
                results.append(self.calculate_rate(calc_input, output_scale))
            except Exception:
                logger.warning("Batch calculation failed for %r", calc_input, exc_info=True)
                results.append(CalculationResult.zero())
        logger.debug("Batch calculated %d rates", len(results))
        return results

    def supports_rate_type(self, rate_type) -> bool:
        return self.dispatcher.supports(rate_type)

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return self.dispatcher.supported_rate_types()

    @staticmethod
    def _resolve_investment_gate(
        rate_type: RateType, plan: Optional[PlanDefinition]
    ) -> RateType:
        """Investment-only rate types fall back to the monthly loan rate on other plans."""
        if rate_type not in INVESTMENT_ONLY_RATE_TYPES:
            return rate_type

        insurance_type_3 = None if plan is None else plan.insurance_type_3
        if insurance_type_3 is None:
            logger.warning(
                "Investment-only rate_type=%s without a plan insurance type; keeping it",
                rate_type.code,
            )
            return rate_type
        if insurance_type_3 in INVESTMENT_INSURANCE_TYPES:
            return rate_type

        logger.info(
            "Non-investment plan (insurance_type_3=%s) with rate_type=%s, using %s",
            insurance_type_3,
            rate_type.code,
            RateType.LOAN_RATE_MONTHLY.code,
        )
        return RateType.LOAN_RATE_MONTHLY

    @staticmethod
    def _resolve_declared_gate(
        rate_type: RateType, plan: Optional[PlanDefinition]
    ) -> RateType:
        """Average declared rates apply to interest-sensitive life plans only."""
        if rate_type != RateType.AVG_DECLARED_RATE:
            return rate_type
        insurance_type_3 = None if plan is None else plan.insurance_type_3
        if insurance_type_3 is None or insurance_type_3 == InsuranceType3.INTEREST_SENSITIVE_LIFE:
            return rate_type

        logger.info(
            "Plan insurance_type_3=%s has no declared rate average, using %s",
            insurance_type_3,
            RateType.LOAN_RATE_MONTHLY.code,
        )
        return RateType.LOAN_RATE_MONTHLY
