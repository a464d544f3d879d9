"""
Schedule Loader (``tce_config.loader``).

Responsibility
--------------
Loads cost schedule YAML files and parses them into the typed, frozen
``tce_kernel.domain.schedule`` value objects.  Runtime callers use
``tce_config.get_active_schedule()``; this module is its building block
and is also used directly by tests and tooling.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on ``tce_kernel``
only; never on ``tce_engines``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError``, ``KeyError`` or
  ``InvalidTaxScheduleError`` with descriptive messages; no silent
  defaults for required fields.
* Numeric values are converted to ``Decimal`` through their string
  form, never through binary float arithmetic.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  source document for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Malformed bracket table or rates  -> ``InvalidTaxScheduleError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from tce_kernel.domain.schedule import (
    AllowanceDefaults,
    CostSchedule,
    InsuranceRates,
    ScheduleStatus,
    TaxBracket,
    TaxBracketTable,
)
from tce_kernel.domain.values import Currency
from tce_kernel.exceptions import InvalidTaxScheduleError
from tce_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a Decimal from a YAML scalar (quoted string, int or float)."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{name}: cannot parse {value!r} as a number") from e


def parse_tax_brackets(data: list[dict[str, Any]]) -> TaxBracketTable:
    """Parse the ordered bracket list; a null upper_bound means open-ended."""
    if not isinstance(data, list):
        raise InvalidTaxScheduleError("tax_brackets must be a list")
    brackets = []
    for index, entry in enumerate(data):
        bound = entry["upper_bound"]
        brackets.append(
            TaxBracket(
                upper_bound=None if bound is None else parse_decimal(
                    bound, f"tax_brackets[{index}].upper_bound"
                ),
                marginal_rate=parse_decimal(entry["rate"], f"tax_brackets[{index}].rate"),
            )
        )
    return TaxBracketTable(brackets=tuple(brackets))


def parse_insurance(data: dict[str, Any]) -> InsuranceRates:
    """Parse social insurance rates."""
    return InsuranceRates(
        employee_rate=parse_decimal(data["employee_rate"], "insurance.employee_rate"),
        employer_rate=parse_decimal(data["employer_rate"], "insurance.employer_rate"),
    )


def parse_allowance_defaults(data: dict[str, Any] | None) -> AllowanceDefaults:
    """Parse statutory allowance defaults; missing keys fall back to dataclass defaults."""
    if not data:
        return AllowanceDefaults()
    kwargs = {
        key: parse_decimal(value, f"allowance_defaults.{key}")
        for key, value in data.items()
    }
    return AllowanceDefaults(**kwargs)


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed schedule document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_schedule(data: dict[str, Any]) -> CostSchedule:
    """
    Parse a ``CostSchedule`` from a document dict.

    Raises:
        KeyError: on a missing required key.
        ValueError: on unparseable dates, numbers or currency.
        InvalidTaxScheduleError: on a malformed bracket table or rates.
    """
    schedule_id = data["schedule_id"]
    try:
        brackets = parse_tax_brackets(data["tax_brackets"])
        insurance = parse_insurance(data["insurance"])
    except InvalidTaxScheduleError as e:
        raise InvalidTaxScheduleError(e.reason, schedule_id=schedule_id) from e

    return CostSchedule(
        schedule_id=schedule_id,
        version=int(data["version"]),
        jurisdiction=str(data["jurisdiction"]).upper(),
        currency=Currency(data["currency"]),
        effective_from=parse_date(data["effective_from"]),
        effective_to=parse_date(data["effective_to"]) if data.get("effective_to") else None,
        tax_brackets=brackets,
        insurance=insurance,
        allowance_defaults=parse_allowance_defaults(data.get("allowance_defaults")),
        status=ScheduleStatus(data.get("status", ScheduleStatus.PUBLISHED.value)),
        checksum=compute_checksum(data),
    )


def load_schedule(path: Path) -> CostSchedule:
    """Load and parse one schedule file."""
    data = load_yaml_file(path)
    schedule = parse_schedule(data)
    logger.debug("schedule_file_loaded", extra={
        "path": str(path),
        "schedule_id": schedule.schedule_id,
        "version": schedule.version,
        "checksum": schedule.checksum,
    })
    return schedule


def load_schedule_directory(directory: Path) -> list[CostSchedule]:
    """Load every ``*.yaml`` schedule in a directory, in file-name order."""
    if not directory.is_dir():
        raise FileNotFoundError(f"Schedule directory not found: {directory}")
    return [load_schedule(path) for path in sorted(directory.glob("*.yaml"))]
