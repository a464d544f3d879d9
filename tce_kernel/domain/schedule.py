"""
Schedule -- Effective-dated statutory parameters for cost computation.

Responsibility:
    Immutable value objects describing one revision of the government
    schedule: the progressive income tax bracket table, the social
    insurance contribution rates, and the statutory allowance defaults.
    These are the injectable configuration consumed by the engines.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Populated by tce_config.loader from YAML; consumed by tce_engines.

Invariants enforced:
    - Bracket upper bounds are positive and strictly increasing
    - Only the last bracket is open-ended, and it must be, so the table
      partitions [0, inf) with no gaps or overlaps
    - Marginal rates lie in [0, 1] and never decrease (progressivity)
    - Insurance rates lie in [0, 1]

Failure modes:
    - InvalidTaxScheduleError on construction with a malformed table or rates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator

from tce_kernel.domain.values import Currency
from tce_kernel.exceptions import InvalidTaxScheduleError


class ScheduleStatus(str, Enum):
    """Lifecycle state of a cost schedule."""

    DRAFT = "draft"
    PUBLISHED = "published"
    RETIRED = "retired"


@dataclass(frozen=True)
class TaxBracket:
    """
    One progressive bracket on annual taxable income.

    upper_bound of None means the bracket is open-ended (infinity).
    """

    upper_bound: Decimal | None
    marginal_rate: Decimal

    @property
    def is_open_ended(self) -> bool:
        return self.upper_bound is None


@dataclass(frozen=True)
class TaxBracketTable:
    """
    Ordered progressive tax bracket table on annual income.

    Contract:
        Bracket i covers (upper_bound[i-1], upper_bound[i]]; the first
        bracket starts at zero. Validated on construction.
    """

    brackets: tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        if not self.brackets:
            raise InvalidTaxScheduleError("tax bracket table is empty")

        previous_bound = Decimal("0")
        previous_rate = Decimal("0")
        last_index = len(self.brackets) - 1
        for index, bracket in enumerate(self.brackets):
            rate = bracket.marginal_rate
            if rate < Decimal("0") or rate > Decimal("1"):
                raise InvalidTaxScheduleError(
                    f"bracket {index} rate {rate} outside [0, 1]"
                )
            if rate < previous_rate:
                raise InvalidTaxScheduleError(
                    f"bracket {index} rate {rate} is lower than preceding rate {previous_rate}"
                )
            if bracket.upper_bound is None:
                if index != last_index:
                    raise InvalidTaxScheduleError(
                        f"bracket {index} is open-ended but is not the last bracket"
                    )
            else:
                if index == last_index:
                    raise InvalidTaxScheduleError(
                        "last bracket must be open-ended"
                    )
                if bracket.upper_bound <= previous_bound:
                    raise InvalidTaxScheduleError(
                        f"bracket {index} upper bound {bracket.upper_bound} "
                        f"does not exceed {previous_bound}"
                    )
                previous_bound = bracket.upper_bound
            previous_rate = rate

    @classmethod
    def from_pairs(
        cls, pairs: list[tuple[Decimal | int | str | None, Decimal | str]]
    ) -> TaxBracketTable:
        """Build a table from (upper_bound, rate) pairs; None bound = open-ended."""
        return cls(
            brackets=tuple(
                TaxBracket(
                    upper_bound=None if bound is None else Decimal(str(bound)),
                    marginal_rate=Decimal(str(rate)),
                )
                for bound, rate in pairs
            )
        )

    def __iter__(self) -> Iterator[TaxBracket]:
        return iter(self.brackets)

    def __len__(self) -> int:
        return len(self.brackets)

    @property
    def boundaries(self) -> tuple[Decimal, ...]:
        """Finite annual upper bounds, ascending."""
        return tuple(b.upper_bound for b in self.brackets if b.upper_bound is not None)

    @property
    def top_rate(self) -> Decimal:
        return self.brackets[-1].marginal_rate


@dataclass(frozen=True)
class InsuranceRates:
    """
    Social insurance contribution rates on insurable gross.

    In a net contract the employer also carries the employee share.
    """

    employee_rate: Decimal = Decimal("0.07")
    employer_rate: Decimal = Decimal("0.23")

    def __post_init__(self) -> None:
        for name in ("employee_rate", "employer_rate"):
            rate = getattr(self, name)
            if rate < Decimal("0") or rate > Decimal("1"):
                raise InvalidTaxScheduleError(f"{name} {rate} outside [0, 1]")

    @property
    def net_contract_employer_rate(self) -> Decimal:
        return self.employer_rate + self.employee_rate


@dataclass(frozen=True)
class AllowanceDefaults:
    """Statutory floors pre-filled into a new compensation input."""

    housing_allowance: Decimal = Decimal("0")
    grocery_allowance: Decimal = Decimal("0")
    children_allowance: Decimal = Decimal("0")
    overtime_base_hours: Decimal = Decimal("176")


@dataclass(frozen=True)
class CostSchedule:
    """
    One effective-dated revision of the statutory cost parameters.

    The checksum is computed by the loader from the source document and
    identifies exactly which configuration produced a breakdown.
    """

    schedule_id: str
    version: int
    jurisdiction: str
    currency: Currency
    effective_from: date
    tax_brackets: TaxBracketTable
    insurance: InsuranceRates = field(default_factory=InsuranceRates)
    allowance_defaults: AllowanceDefaults = field(default_factory=AllowanceDefaults)
    effective_to: date | None = None
    status: ScheduleStatus = ScheduleStatus.PUBLISHED
    checksum: str = ""

    def is_effective(self, on_date: date) -> bool:
        """Check if the schedule applies on the given date."""
        if on_date < self.effective_from:
            return False
        if self.effective_to and on_date > self.effective_to:
            return False
        return True
