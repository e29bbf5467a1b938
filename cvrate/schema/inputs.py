"""Immutable calculation inputs."""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from cvrate.utils.date import to_optional_date
from cvrate.utils.mathutils import HUNDRED, to_decimal

from .enums import RateType


@dataclass(frozen=True)
class CalculationInput:
    """Input for one rate calculation.

    Attributes:
        begin_date: Start of the calculation span (None yields the zero result)
        end_date: End of the calculation span (None yields the zero result)
        principal_amount: Principal the interest accrues on
        rate_type: Rate type classifier (a RateType or its single-character code)
        known_rate: Caller-supplied rate; zero means "not supplied"
        rate_subtraction: Amount subtracted from looked-up rates
        rate_discount_percent: Percentage applied after the subtraction (100 = none)
        sub_account_plan_code: Plan code of the rate timeline to consult
        policy_issue_date: Issue date used by anniversary-based lookups
        iv_target_code: Investment target of the sub-account, when known
    """

    begin_date: Optional[date] = None
    end_date: Optional[date] = None
    principal_amount: Decimal = Decimal("0")
    rate_type: Optional[Union[RateType, str]] = None
    known_rate: Decimal = Decimal("0")
    rate_subtraction: Decimal = Decimal("0")
    rate_discount_percent: Decimal = HUNDRED
    sub_account_plan_code: Optional[str] = None
    policy_issue_date: Optional[date] = None
    iv_target_code: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "begin_date", to_optional_date(self.begin_date))
        object.__setattr__(self, "end_date", to_optional_date(self.end_date))
        object.__setattr__(self, "policy_issue_date", to_optional_date(self.policy_issue_date))
        for name in ("principal_amount", "known_rate", "rate_subtraction", "rate_discount_percent"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if isinstance(self.rate_type, str):
            resolved = RateType.from_code(self.rate_type)
            # Unknown codes are kept verbatim so the dispatcher can report them.
            if resolved is not None:
                object.__setattr__(self, "rate_type", resolved)

    @property
    def has_known_rate(self) -> bool:
        return self.known_rate != 0

    @property
    def has_span(self) -> bool:
        return self.begin_date is not None and self.end_date is not None

    def with_plan_code(self, sub_account_plan_code: str) -> "CalculationInput":
        return replace(self, sub_account_plan_code=sub_account_plan_code)

    def with_rate_type(self, rate_type: RateType) -> "CalculationInput":
        return replace(self, rate_type=rate_type)


@dataclass(frozen=True)
class RateLookupResult:
    """A timeline rate before and after the subtraction/discount adjustments."""

    original_rate: Decimal
    adjusted_rate: Decimal

    @classmethod
    def zero(cls) -> "RateLookupResult":
        return cls(Decimal("0"), Decimal("0"))

    @property
    def found(self) -> bool:
        return self.adjusted_rate != 0 or self.original_rate != 0
