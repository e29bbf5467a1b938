"""
Core enumeration types for the rate engine.
"""

from enum import Enum
from typing import FrozenSet, Optional


class RateType(Enum):
    """Rate type classifier selecting the calculation family."""

    DIVIDEND_RATE = "0"
    INTEREST_CALC_RATE = "1"
    LOAN_RATE_MONTHLY = "2"
    LOAN_RATE_MONTHLY_V2 = "3"
    LOAN_RATE_LAST_MONTH = "4"
    FOUR_BANK_RATE = "5"
    AVG_DECLARED_RATE = "8"
    FREE_LOOK_A = "A"
    FREE_LOOK_B = "B"
    DEPOSIT_RATE = "C"
    ANNUITY_RATE_D = "D"
    FREE_LOOK_E = "E"
    COMPOUND_RATE = "F"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["RateType"]:
        """Resolve a single-character code; unknown or missing codes give None."""
        if code is None:
            return None
        try:
            return cls(code.upper())
        except ValueError:
            return None


class IntRateType(Enum):
    """Rate-type keys of the rate timeline."""

    ORDINARY = "0"
    FREE_LOOK = "1"
    LOAN = "2"
    DECLARED = "5"
    CORPORATE_ANNUITY = "8"
    INVESTMENT_YIELD = "9"


class InsuranceType3:
    """Values of the plan-level ``insurance_type_3`` classifier."""

    INVESTMENT = "F"
    VARIABLE_ANNUITY = "G"
    CORPORATE_ANNUITY = "H"
    INTEREST_SENSITIVE_LIFE = "I"


INVESTMENT_INSURANCE_TYPES: FrozenSet[str] = frozenset(
    {InsuranceType3.INVESTMENT, InsuranceType3.VARIABLE_ANNUITY, InsuranceType3.CORPORATE_ANNUITY}
)

ANNUITY_INSURANCE_TYPES: FrozenSet[str] = frozenset(
    {InsuranceType3.VARIABLE_ANNUITY, InsuranceType3.CORPORATE_ANNUITY}
)

# Rate types that only investment plans may use; other plans fall back to
# the monthly loan rate.
INVESTMENT_ONLY_RATE_TYPES: FrozenSet[RateType] = frozenset(
    {
        RateType.FREE_LOOK_A,
        RateType.FREE_LOOK_B,
        RateType.DEPOSIT_RATE,
        RateType.ANNUITY_RATE_D,
        RateType.FREE_LOOK_E,
        RateType.COMPOUND_RATE,
    }
)

FREE_LOOK_RATE_TYPES: FrozenSet[RateType] = frozenset(
    {RateType.FREE_LOOK_A, RateType.FREE_LOOK_B, RateType.FREE_LOOK_E}
)
