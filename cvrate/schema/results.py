"""Calculation results and per-period breakdown rows."""

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class MonthlyPeriodDetail:
    """One iteration step of a month-by-month calculation.

    Rates are in hundredths of a percent, like every rate in the engine.
    """

    start_date: date
    end_date: date
    month: str
    day_count: int
    original_rate: Decimal
    effective_rate: Decimal
    period_interest: Decimal
    principal: Decimal
    compound_factor: Optional[Decimal] = None
    tag: Optional[str] = None


@dataclass(frozen=True)
class CalculationResult:
    """Effective rate, interest amount and the optional monthly breakdown."""

    effective_rate: Decimal
    interest_amount: Decimal
    monthly_details: Tuple[MonthlyPeriodDetail, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.monthly_details, tuple):
            object.__setattr__(self, "monthly_details", tuple(self.monthly_details))

    @classmethod
    def zero(cls) -> "CalculationResult":
        """Canonical answer to invalid or boundary input."""
        return ZERO_RESULT

    @property
    def is_zero(self) -> bool:
        return (
            self.effective_rate == 0
            and self.interest_amount == 0
            and not self.monthly_details
        )

    def total_period_interest(self) -> Decimal:
        return sum((d.period_interest for d in self.monthly_details), Decimal("0"))

    def to_frame(self) -> pd.DataFrame:
        """Monthly breakdown as a DataFrame, one row per period."""
        columns = [f.name for f in MonthlyPeriodDetail.__dataclass_fields__.values()]
        rows = [asdict(detail) for detail in self.monthly_details]
        return pd.DataFrame(rows, columns=columns)


ZERO_RESULT = CalculationResult(
    effective_rate=Decimal("0"),
    interest_amount=Decimal("0"),
    monthly_details=(),
)
