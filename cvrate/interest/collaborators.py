"""
Read-only upstream lookups consumed by the annuity calculation.

Only the protocols matter to the engine; the dict-backed implementations
serve scripts and tests.
"""

from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from cvrate.schema.plans import InvestmentTarget, PlanDetail


class PlanDetailSource(Protocol):
    def find_by_plan(self, plan_code: str, version: str) -> List[PlanDetail]:
        """Investment-target links of a plan version, in source order."""
        ...


class InvestmentTargetSource(Protocol):
    def get_by_target_code(self, iv_target_code: str) -> Optional[InvestmentTarget]:
        ...


class InMemoryPlanDetailSource:
    def __init__(self, details: Iterable[PlanDetail] = ()):
        self._details: Dict[Tuple[str, str], List[PlanDetail]] = {}
        for detail in details:
            self.add(detail)

    def add(self, detail: PlanDetail) -> None:
        self._details.setdefault((detail.plan_code, detail.version), []).append(detail)

    def find_by_plan(self, plan_code: str, version: str) -> List[PlanDetail]:
        return list(self._details.get((plan_code, version), []))


class InMemoryInvestmentTargetSource:
    def __init__(self, targets: Iterable[InvestmentTarget] = ()):
        self._targets: Dict[str, InvestmentTarget] = {
            target.iv_target_code: target for target in targets
        }

    def add(self, target: InvestmentTarget) -> None:
        self._targets[target.iv_target_code] = target

    def get_by_target_code(self, iv_target_code: str) -> Optional[InvestmentTarget]:
        return self._targets.get(iv_target_code)
