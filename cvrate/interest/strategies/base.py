"""
Base class for rate calculation strategies.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import FrozenSet, Optional

from cvrate.interest.lookup import RateLookup
from cvrate.schema.enums import RateType
from cvrate.schema.inputs import CalculationInput
from cvrate.schema.plans import PlanDefinition, PlanNote
from cvrate.schema.results import CalculationResult
from cvrate.utils.mathutils import (
    AMOUNT_SCALE,
    BASIS_POINTS,
    RATE_SCALE,
    divide,
    round_half_up,
)


class InterestRateStrategy(ABC):
    """
    One calculation family.

    Strategies hold no mutable state and are safe to call concurrently.
    Invalid spans and missing context give the zero result, never an error.
    """

    def __init__(self, rate_lookup: RateLookup):
        self.rate_lookup = rate_lookup

    @abstractmethod
    def supported_rate_types(self) -> FrozenSet[RateType]:
        pass

    @abstractmethod
    def calculate(
        self,
        calc_input: CalculationInput,
        output_scale: int = 0,
        plan: Optional[PlanDefinition] = None,
        plan_note: Optional[PlanNote] = None,
    ) -> CalculationResult:
        """
        Calculate the effective rate and interest for one input.

        Args:
            calc_input: Date span, principal, rate type and adjustments
            output_scale: Fractional digits of the interest amount
            plan: Plan definition of the policy, when known
            plan_note: Investment plan note, when known

        Returns:
            Calculation result (the zero result for invalid input)
        """
        pass

    @property
    def name(self) -> str:
        return type(self).__name__

    @staticmethod
    def _span_invalid(calc_input: CalculationInput, allow_equal: bool) -> bool:
        """True for a missing date, an inverted span, or an empty one unless ``allow_equal``."""
        if not calc_input.has_span:
            return True
        if allow_equal:
            return calc_input.begin_date > calc_input.end_date
        return calc_input.begin_date >= calc_input.end_date

    @staticmethod
    def _weighted_average(weighted_sum: Decimal, total_days: int) -> Decimal:
        if total_days <= 0:
            return Decimal("0")
        return divide(weighted_sum, total_days, RATE_SCALE)

    @staticmethod
    def _simple_interest(
        principal: Decimal, rate: Decimal, days: int, year_days: int, scale: int
    ) -> Decimal:
        """``principal * rate / 10000 * days / year_days`` with the amount-first division order."""
        per_year = divide(principal * rate, BASIS_POINTS, AMOUNT_SCALE)
        return round_half_up(divide(per_year * days, year_days, AMOUNT_SCALE), scale)
