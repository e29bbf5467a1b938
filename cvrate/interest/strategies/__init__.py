"""Rate calculation strategies, one per calculation family."""

from .annuity import AnnuityRateStrategy
from .avg_declared import AvgDeclaredRateStrategy
from .base import InterestRateStrategy
from .deposit import DepositRateStrategy
from .dividend import DividendRateStrategy
from .four_bank import FourBankRateStrategy
from .free_look import FreeLookRateStrategy
from .interest_calc import InterestCalcRateStrategy
from .last_month import LastMonthRateStrategy
from .loan import LoanRateStrategy

__all__ = [
    "InterestRateStrategy",
    "AnnuityRateStrategy",
    "AvgDeclaredRateStrategy",
    "DepositRateStrategy",
    "DividendRateStrategy",
    "FourBankRateStrategy",
    "FreeLookRateStrategy",
    "InterestCalcRateStrategy",
    "LastMonthRateStrategy",
    "LoanRateStrategy",
]
