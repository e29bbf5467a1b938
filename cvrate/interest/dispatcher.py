"""
Maps rate types to their calculation strategy.

The mapping is built once from the registered strategies and must cover
every RateType exactly once.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Union

from cvrate.errors import StrategyRegistrationError, UnsupportedRateTypeError
from cvrate.schema.enums import RateType

from .strategies.base import InterestRateStrategy

logger = logging.getLogger(__name__)


class RateStrategyDispatcher:
    """Closed RateType -> strategy table."""

    def __init__(self, strategies: Iterable[InterestRateStrategy]):
        table: Dict[RateType, InterestRateStrategy] = {}
        for strategy in strategies:
            for rate_type in strategy.supported_rate_types():
                if rate_type in table:
                    raise StrategyRegistrationError(
                        f"Rate type {rate_type.code} registered by both "
                        f"{table[rate_type].name} and {strategy.name}"
                    )
                table[rate_type] = strategy

        missing = [rate_type.code for rate_type in RateType if rate_type not in table]
        if missing:
            raise StrategyRegistrationError(f"No strategy registered for rate types: {missing}")

        self._table = table
        logger.info(
            "Strategy dispatcher initialized with %d rate types: %s",
            len(table),
            [rate_type.code for rate_type in table],
        )

    def dispatch(self, rate_type: Union[RateType, str]) -> InterestRateStrategy:
        """
        Strategy for ``rate_type``.

        Raises:
            UnsupportedRateTypeError: The code names no known rate type
        """
        resolved = rate_type if isinstance(rate_type, RateType) else RateType.from_code(rate_type)
        if resolved is None or resolved not in self._table:
            raise UnsupportedRateTypeError(
                rate_type, [known.code for known in self._table]
            )
        return self._table[resolved]

    def supports(self, rate_type: Union[RateType, str]) -> bool:
        resolved = rate_type if isinstance(rate_type, RateType) else RateType.from_code(rate_type)
        return resolved is not None and resolved in self._table

    def supported_rate_types(self) -> FrozenSet[RateType]:
        return frozenset(self._table)
