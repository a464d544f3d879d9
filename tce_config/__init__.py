"""
tce_config -- single public entrypoint for statutory cost schedules.

Responsibility:
    Provides the runtime way to obtain the tax bracket table, insurance
    rates and allowance defaults through ``get_active_schedule()``.
    Schedules are versioned YAML documents under ``schedules/``; a yearly
    revision by the tax authority is a new file, not a code change.

Architecture position:
    Configuration -- sits above ``tce_kernel``.  Engines receive the
    resulting ``CostSchedule`` by injection.

Invariants enforced:
    - Every schedule set passes ``validate_schedule_set`` before use.
    - Only PUBLISHED schedules are selected at runtime.
    - Among schedules effective on the requested date the one with the
      latest ``effective_from`` (then highest version) wins.

Failure modes:
    - ``ScheduleNotFoundError`` -- no published schedule covers the
      jurisdiction and date.
    - ``InvalidTaxScheduleError`` -- a schedule file or the schedule set
      fails validation.
    - ``FileNotFoundError`` -- the schedule directory does not exist.

Audit relevance:
    Every ``get_active_schedule()`` call emits a ``TCE_CONFIG_TRACE`` log
    entry with the schedule id, version and checksum, tying each cost
    breakdown to the exact statutory parameters that produced it.
"""

from __future__ import annotations

import functools
from datetime import date
from pathlib import Path

from tce_config.loader import load_schedule_directory
from tce_config.validator import validate_schedule_set
from tce_kernel.domain.schedule import CostSchedule, ScheduleStatus
from tce_kernel.exceptions import InvalidTaxScheduleError, ScheduleNotFoundError
from tce_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default schedules directory
_DEFAULT_SCHEDULE_DIR = Path(__file__).parent / "schedules"

DEFAULT_JURISDICTION = "IR"


@functools.lru_cache(maxsize=8)
def load_schedules(schedule_dir: Path = _DEFAULT_SCHEDULE_DIR) -> tuple[CostSchedule, ...]:
    """
    Load and validate every schedule in a directory (cached per directory).

    Raises:
        InvalidTaxScheduleError: if the set fails validation.
    """
    schedules = load_schedule_directory(schedule_dir)
    validation = validate_schedule_set(schedules)
    for warning in validation.warnings:
        _logger.warning("schedule_validation_warning", extra={"warning": warning})
    if not validation.is_valid:
        raise InvalidTaxScheduleError(
            "schedule validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    return tuple(schedules)


def get_active_schedule(
    jurisdiction: str = DEFAULT_JURISDICTION,
    as_of: date | None = None,
    schedule_dir: Path | None = None,
) -> CostSchedule:
    """The public schedule entrypoint.

    Args:
        jurisdiction: Jurisdiction code (e.g. "IR").
        as_of: Date the schedule must be effective on; today when omitted.
        schedule_dir: Override path to the schedules directory.

    Returns:
        The published CostSchedule in force on ``as_of``.

    Raises:
        ScheduleNotFoundError: if no published schedule matches.
    """
    on_date = as_of or date.today()
    schedules = load_schedules(schedule_dir or _DEFAULT_SCHEDULE_DIR)
    jurisdiction = jurisdiction.upper()

    candidates = [
        s for s in schedules
        if s.jurisdiction == jurisdiction
        and s.status == ScheduleStatus.PUBLISHED
        and s.is_effective(on_date)
    ]
    if not candidates:
        raise ScheduleNotFoundError(jurisdiction, on_date.isoformat())

    schedule = max(candidates, key=lambda s: (s.effective_from, s.version))

    _logger.info(
        "TCE_CONFIG_TRACE",
        extra={
            "trace_type": "TCE_CONFIG_TRACE",
            "schedule_id": schedule.schedule_id,
            "schedule_version": schedule.version,
            "checksum": schedule.checksum,
            "jurisdiction": schedule.jurisdiction,
            "currency": schedule.currency.code,
            "as_of": on_date.isoformat(),
            "bracket_count": len(schedule.tax_brackets),
        },
    )
    return schedule


__all__ = [
    "DEFAULT_JURISDICTION",
    "get_active_schedule",
    "load_schedules",
]
