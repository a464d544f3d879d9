"""
Pure domain layer.

Value objects used by every engine, with NO dependencies on:
- Configuration files
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from tce_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from tce_kernel.domain.schedule import (
    AllowanceDefaults,
    CostSchedule,
    InsuranceRates,
    ScheduleStatus,
    TaxBracket,
    TaxBracketTable,
)
from tce_kernel.domain.values import Currency, Money

__all__ = [
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "AllowanceDefaults",
    "CostSchedule",
    "InsuranceRates",
    "ScheduleStatus",
    "TaxBracket",
    "TaxBracketTable",
]
