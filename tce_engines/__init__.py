"""
Module: tce_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    Total Cost of Employment pipeline.  This is the canonical import
    surface for callers (form handlers, API endpoints, reports).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import tce_kernel (values, schedule types, logging, exceptions).
    The default schedule is resolved through tce_config only when a
    caller does not inject one.

Invariants enforced:
    - Purity: engines never read files, environment, network or the clock.
    - Decimal-only arithmetic; rounding happens at the output boundary.
    - Determinism: identical inputs and schedule produce identical outputs.

Usage:
    from tce_engines import CompensationInput, ContractMode, CostComposer
    from tce_engines import GrossUpSolver, TaxBracketEvaluator
"""

from tce_kernel.logging_config import get_logger

logger = get_logger("engines")

from tce_engines.cost_composer import (
    OVERTIME_PREMIUM,
    CompensationInput,
    ContractMode,
    CostBreakdown,
    CostComposer,
    compose,
    switch_mode,
)
from tce_engines.gross_up import GrossUpResult, GrossUpSolver
from tce_engines.tax_brackets import BracketSlice, TaxBracketEvaluator
from tce_engines.validation import (
    ValidationFinding,
    ensure_valid,
    validate_compensation_input,
)

__all__ = [
    # Tax
    "TaxBracketEvaluator",
    "BracketSlice",
    # Gross-up
    "GrossUpSolver",
    "GrossUpResult",
    # Composition
    "CompensationInput",
    "ContractMode",
    "CostBreakdown",
    "CostComposer",
    "OVERTIME_PREMIUM",
    "compose",
    "switch_mode",
    # Validation
    "ValidationFinding",
    "validate_compensation_input",
    "ensure_valid",
]
