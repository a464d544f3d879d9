"""
Schedule Validator (``tce_config.validator``).

Responsibility
--------------
Semantic checks on parsed cost schedules that go beyond the structural
invariants enforced by the value objects themselves, and cross-checks
across a set of schedules.

Invariants enforced
-------------------
* Gross-up solvability -- employee insurance rate plus the top marginal
  tax rate must stay below 1, otherwise take-home pay stops growing
  with gross and the net-to-gross solve cannot converge.
* Effective window -- ``effective_to`` is not before ``effective_from``.
* Allowance defaults are non-negative; overtime base hours are positive.
* Published schedules of one jurisdiction do not overlap in time.

Failure modes
-------------
* Errors (``ScheduleValidationResult.errors``)  -> schedule MUST NOT be used.
* Warnings  -> schedule may be used but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from tce_kernel.domain.schedule import CostSchedule, ScheduleStatus


@dataclass
class ScheduleValidationResult:
    """
    Result of schedule validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_schedule(schedule: CostSchedule) -> ScheduleValidationResult:
    """Validate a single schedule."""
    result = ScheduleValidationResult()

    _validate_solvability(schedule, result)
    _validate_effective_window(schedule, result)
    _validate_allowance_defaults(schedule, result)
    _validate_exemption(schedule, result)

    return result


def validate_schedule_set(schedules: list[CostSchedule]) -> ScheduleValidationResult:
    """Validate every schedule, then check for overlapping published windows."""
    result = ScheduleValidationResult()
    for schedule in schedules:
        single = validate_schedule(schedule)
        result.errors.extend(single.errors)
        result.warnings.extend(single.warnings)

    seen_ids: dict[tuple[str, int], None] = {}
    for schedule in schedules:
        key = (schedule.schedule_id, schedule.version)
        if key in seen_ids:
            result.add_error(
                f"Duplicate schedule: {schedule.schedule_id} v{schedule.version}"
            )
        seen_ids[key] = None

    published = sorted(
        (s for s in schedules if s.status == ScheduleStatus.PUBLISHED),
        key=lambda s: (s.jurisdiction, s.effective_from),
    )
    for earlier, later in zip(published, published[1:]):
        if earlier.jurisdiction != later.jurisdiction:
            continue
        earlier_end = earlier.effective_to or date.max
        if later.effective_from <= earlier_end:
            result.add_error(
                f"Schedules {earlier.schedule_id} v{earlier.version} and "
                f"{later.schedule_id} v{later.version} overlap for "
                f"jurisdiction {earlier.jurisdiction}"
            )

    return result


def _validate_solvability(schedule: CostSchedule, result: ScheduleValidationResult) -> None:
    slope_loss = schedule.insurance.employee_rate + schedule.tax_brackets.top_rate
    if slope_loss >= Decimal("1"):
        result.add_error(
            f"Schedule {schedule.schedule_id}: employee insurance rate plus top tax "
            f"rate is {slope_loss}; net pay would not increase with gross pay"
        )


def _validate_effective_window(schedule: CostSchedule, result: ScheduleValidationResult) -> None:
    if schedule.effective_to and schedule.effective_to < schedule.effective_from:
        result.add_error(
            f"Schedule {schedule.schedule_id}: effective_to {schedule.effective_to} "
            f"is before effective_from {schedule.effective_from}"
        )


def _validate_allowance_defaults(schedule: CostSchedule, result: ScheduleValidationResult) -> None:
    defaults = schedule.allowance_defaults
    for name in ("housing_allowance", "grocery_allowance", "children_allowance"):
        value = getattr(defaults, name)
        if value < Decimal("0"):
            result.add_error(
                f"Schedule {schedule.schedule_id}: allowance default {name} is negative"
            )
    if defaults.overtime_base_hours <= Decimal("0"):
        result.add_error(
            f"Schedule {schedule.schedule_id}: overtime_base_hours must be positive"
        )


def _validate_exemption(schedule: CostSchedule, result: ScheduleValidationResult) -> None:
    if schedule.tax_brackets.brackets[0].marginal_rate > Decimal("0"):
        result.add_warning(
            f"Schedule {schedule.schedule_id}: first tax bracket has a non-zero rate "
            f"(no exempt band)"
        )
