"""
Typed Exception Hierarchy for the TCE engines.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll cost figures feed contracts and budgets, so callers must be able to
tell a bad schedule from a bad input from a solver that could not reach the
requested precision. Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        breakdown = compose(payload, schedule, strict=True)
    except GrossUpNotConvergedError as e:
        api_response(code=e.code, residual=str(e.residual))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TceError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidTaxScheduleError
    |   +-- ScheduleNotFoundError
    |
    +-- CalculationError
    |   +-- GrossUpNotConvergedError
    |
    +-- InputValidationError

The composition pipeline itself never raises inside its input invariants;
out-of-range inputs get deterministic zero fallbacks. These exceptions are
raised at configuration load time, by the upstream validator, or on explicit
strict-mode request.
===============================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class TceError(Exception):
    """
    Base exception for all TCE errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "TCE_ERROR"


# Configuration exceptions


class ConfigurationError(TceError):
    """Base exception for cost schedule configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidTaxScheduleError(ConfigurationError):
    """Tax bracket table or schedule rates violate their invariants."""

    code: str = "INVALID_TAX_SCHEDULE"

    def __init__(self, reason: str, schedule_id: str | None = None):
        self.reason = reason
        self.schedule_id = schedule_id
        prefix = f"Schedule {schedule_id}: " if schedule_id else ""
        super().__init__(f"{prefix}{reason}")


class ScheduleNotFoundError(ConfigurationError):
    """No cost schedule covers the requested jurisdiction and date."""

    code: str = "SCHEDULE_NOT_FOUND"

    def __init__(self, jurisdiction: str, as_of: str):
        self.jurisdiction = jurisdiction
        self.as_of = as_of
        super().__init__(
            f"No cost schedule for jurisdiction {jurisdiction} effective on {as_of}"
        )


# Calculation exceptions


class CalculationError(TceError):
    """Base exception for calculation errors."""

    code: str = "CALCULATION_ERROR"


class GrossUpNotConvergedError(CalculationError):
    """Net-to-gross solve did not reach the requested tolerance."""

    code: str = "GROSS_UP_NOT_CONVERGED"

    def __init__(
        self,
        target_net: Decimal,
        gross: Decimal,
        residual: Decimal,
        iterations: int,
    ):
        self.target_net = target_net
        self.gross = gross
        self.residual = residual
        self.iterations = iterations
        super().__init__(
            f"Gross-up for net {target_net} did not converge after "
            f"{iterations} iterations (residual {residual})"
        )


# Input validation


class InputValidationError(TceError):
    """Compensation input failed upstream validation."""

    code: str = "INPUT_VALIDATION_ERROR"

    def __init__(self, findings: tuple[Any, ...]):
        self.findings = findings
        fields = ", ".join(f.field for f in findings)
        super().__init__(f"Invalid compensation input: {fields}")
