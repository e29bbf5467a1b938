"""Rate timeline lookups with the caller's subtraction and discount applied."""

import logging
from datetime import date
from decimal import Decimal

from cvrate.schema.inputs import CalculationInput, RateLookupResult
from cvrate.timeline.base import RateSource
from cvrate.utils.mathutils import HUNDRED, RATE_SCALE, divide

logger = logging.getLogger(__name__)


def apply_discounts(
    original_rate: Decimal, rate_subtraction: Decimal, rate_discount_percent: Decimal
) -> Decimal:
    """
    Adjust a timeline rate: subtract first, then apply the discount percentage.

    The order is fixed. A zero subtraction is skipped; a discount of 0 or
    100 leaves the rate unchanged.
    """
    rate = original_rate
    if rate_subtraction != 0:
        rate = rate - rate_subtraction
    if rate_discount_percent != 0 and rate_discount_percent != HUNDRED:
        rate = divide(rate * rate_discount_percent, HUNDRED, RATE_SCALE)
    return rate


class RateLookup:
    """Looks up the sub-account's timeline rate for one rate-type key."""

    def __init__(self, timeline: RateSource):
        self.timeline = timeline

    def lookup_rate(
        self, calc_input: CalculationInput, int_rate_type: str, base_date: date
    ) -> RateLookupResult:
        """
        Rate in effect at ``base_date`` for the input's sub-account plan code.

        Args:
            calc_input: Supplies the plan code and the adjustment factors
            int_rate_type: Timeline rate-type key
            base_date: Lookup date, usually a month start

        Returns:
            Original and adjusted rate; (0, 0) when the plan code or the rate is missing
        """
        plan_code = calc_input.sub_account_plan_code
        if plan_code is None:
            return RateLookupResult.zero()

        interval = self.timeline.get_effective_rate(plan_code, int_rate_type, base_date)
        if interval is None:
            logger.debug(
                "No rate for plan=%s type=%s date=%s", plan_code, int_rate_type, base_date
            )
            return RateLookupResult.zero()

        original_rate = interval.rate
        adjusted_rate = apply_discounts(
            original_rate, calc_input.rate_subtraction, calc_input.rate_discount_percent
        )
        return RateLookupResult(original_rate=original_rate, adjusted_rate=adjusted_rate)

    def resolve_rate(
        self, calc_input: CalculationInput, int_rate_type: str, base_date: date
    ) -> RateLookupResult:
        """The caller's known rate when supplied, else the adjusted timeline rate."""
        if calc_input.has_known_rate:
            return RateLookupResult(calc_input.known_rate, calc_input.known_rate)
        return self.lookup_rate(calc_input, int_rate_type, base_date)
