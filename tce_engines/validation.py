"""
tce_engines.validation -- Upstream validation of compensation inputs.

Responsibility:
    Reject inputs outside the composer's invariants before they reach it:
    negative amounts, negative hours, and overtime hours without a
    positive overtime base.  The composer never calls this module; it
    keeps its own zero fallbacks so a half-typed form never crashes.

Architecture position:
    Engines -- pure checks, zero I/O.  Called by the form/API layer.

Failure modes:
    - ``validate_compensation_input`` never raises; it returns findings.
    - ``ensure_valid`` raises ``InputValidationError`` carrying them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tce_engines.cost_composer import HOUR_FIELDS, MONETARY_FIELDS, CompensationInput
from tce_kernel.exceptions import InputValidationError
from tce_kernel.logging_config import get_logger

logger = get_logger("engines.validation")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class ValidationFinding:
    """A single input problem with a machine-readable code."""

    code: str
    field: str
    message: str


def validate_compensation_input(
    compensation: CompensationInput,
) -> tuple[ValidationFinding, ...]:
    """Return every invariant violation in ``compensation`` (empty when valid)."""
    findings: list[ValidationFinding] = []

    for name in MONETARY_FIELDS:
        value = getattr(compensation, name)
        if value < _ZERO:
            findings.append(ValidationFinding(
                code="NEGATIVE_AMOUNT",
                field=name,
                message=f"{name} must not be negative, got {value}",
            ))

    for name in HOUR_FIELDS:
        value = getattr(compensation, name)
        if value < _ZERO:
            findings.append(ValidationFinding(
                code="NEGATIVE_HOURS",
                field=name,
                message=f"{name} must not be negative, got {value}",
            ))

    if compensation.overtime_hours > _ZERO and compensation.overtime_base_hours <= _ZERO:
        findings.append(ValidationFinding(
            code="ZERO_OVERTIME_BASE",
            field="overtime_base_hours",
            message="overtime_base_hours must be positive when overtime_hours is set",
        ))

    if findings:
        logger.info("compensation_input_rejected", extra={
            "finding_count": len(findings),
            "fields": [f.field for f in findings],
        })
    return tuple(findings)


def ensure_valid(compensation: CompensationInput) -> CompensationInput:
    """Return ``compensation`` unchanged, or raise InputValidationError."""
    findings = validate_compensation_input(compensation)
    if findings:
        raise InputValidationError(findings)
    return compensation
