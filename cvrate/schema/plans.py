"""
Read-only records supplied by upstream plan and investment lookups.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlanDefinition:
    """Plan definition fields consulted by the rate routing rules.

    Attributes:
        plan_code: Plan code
        version: Plan version
        insurance_type_3: Product variant flag (F/G/H investment, I interest-sensitive)
        currency: Plan currency (informational)
    """

    plan_code: str
    version: str = "1"
    insurance_type_3: Optional[str] = None
    currency: Optional[str] = None


@dataclass(frozen=True)
class PlanNote:
    """Investment plan note; supplies the free-look default sub-account."""

    plan_code: str
    version: str = "1"
    free_look_rate_code: Optional[str] = None


@dataclass(frozen=True)
class PlanDetail:
    """Link between a plan version and one of its investment targets."""

    plan_code: str
    version: str
    iv_target_code: str


@dataclass(frozen=True)
class InvestmentTarget:
    """Investment target parameters used by compound annuity interest.

    Attributes:
        iv_target_code: Investment target code
        int_apply_yr_ind: "1" when the issue-date rate applies for the first years
        int_apply_yr: Number of policy years the issue-date rate applies
    """

    iv_target_code: str
    int_apply_yr_ind: Optional[str] = None
    int_apply_yr: Optional[int] = None
