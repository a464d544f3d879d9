"""
Pytest fixtures for the TCE test suite.

Provides:
- The shipped cost schedule and engines built on it
- A stand-alone schedule factory for tests that need custom tables
- Logging reset between tests
"""

from datetime import date
from decimal import Decimal

import pytest

from tce_config import get_active_schedule
from tce_engines.cost_composer import CostComposer
from tce_engines.gross_up import GrossUpSolver
from tce_engines.tax_brackets import TaxBracketEvaluator
from tce_kernel.domain.schedule import (
    AllowanceDefaults,
    CostSchedule,
    InsuranceRates,
    TaxBracketTable,
)
from tce_kernel.domain.values import Currency
from tce_kernel.logging_config import reset_logging

STATUTORY_BRACKETS = [
    (1_680_000_000, "0"),
    (2_760_000_000, "0.10"),
    (4_320_000_000, "0.15"),
    (7_200_000_000, "0.20"),
    (12_000_000_000, "0.25"),
    (None, "0.30"),
]


def make_schedule(
    brackets=None,
    employee_rate: str = "0.07",
    employer_rate: str = "0.23",
    currency: str = "IRR",
    **overrides,
) -> CostSchedule:
    """Build a schedule in memory without touching the YAML files."""
    values = dict(
        schedule_id="TEST",
        version=1,
        jurisdiction="IR",
        currency=Currency(currency),
        effective_from=date(2024, 3, 20),
        tax_brackets=TaxBracketTable.from_pairs(brackets or STATUTORY_BRACKETS),
        insurance=InsuranceRates(
            employee_rate=Decimal(employee_rate),
            employer_rate=Decimal(employer_rate),
        ),
        allowance_defaults=AllowanceDefaults(
            housing_allowance=Decimal("11000000"),
            grocery_allowance=Decimal("8500000"),
        ),
    )
    values.update(overrides)
    return CostSchedule(**values)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(scope="session")
def schedule() -> CostSchedule:
    return get_active_schedule(as_of=date(2025, 1, 1))


@pytest.fixture
def evaluator(schedule) -> TaxBracketEvaluator:
    return TaxBracketEvaluator(schedule.tax_brackets)


@pytest.fixture
def solver(evaluator, schedule) -> GrossUpSolver:
    return GrossUpSolver(evaluator, schedule.insurance.employee_rate)


@pytest.fixture
def composer(schedule) -> CostComposer:
    return CostComposer(schedule)


@pytest.fixture
def schedule_factory():
    """Factory for in-memory schedules with custom brackets or rates."""
    return make_schedule
