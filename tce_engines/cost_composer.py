"""
tce_engines.cost_composer -- Total Cost of Employment composition.

Responsibility:
    Turn a compensation input and a contract mode into the employer's
    full monthly cost of an employee: gross pay, variable pay, statutory
    insurance and accruals, welfare, hidden HR costs, the employee's net
    pay, and the cost multiplier.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Depends on
    ``tce_engines.tax_brackets`` and ``tce_engines.gross_up``; statutory
    rates and the tax table come from an injected ``CostSchedule``.

Sequencing:
    raw inputs -> effective gross base -> insurable gross -> derived
    cost terms -> aggregate totals.  Each step reads only values computed
    before it; nothing flows back into tax or gross-up.

Invariants enforced:
    - Decimal-only arithmetic; outputs are rounded once, to the schedule
      currency's smallest unit, at the boundary.
    - Division guards (zero overtime base hours, zero net salary) yield
      zero, never an exception.
    - In net contracts the insurable allowances are discarded.

Failure modes:
    - None for inputs inside their invariants.  Gross-up non-convergence
      is surfaced on ``CostBreakdown.converged`` (or raised with
      ``strict=True``).

Usage:
    from decimal import Decimal
    from tce_config import get_active_schedule
    from tce_engines.cost_composer import CompensationInput, ContractMode, CostComposer

    composer = CostComposer(get_active_schedule())
    breakdown = composer.compose(
        CompensationInput(contract_mode=ContractMode.GROSS, base_salary=Decimal("50000000"))
    )
    print(breakdown.total_monthly_cost)  # Money: 78166667 IRR
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Self

from tce_engines.gross_up import DEFAULT_MAX_ITERATIONS, GrossUpResult, GrossUpSolver
from tce_engines.tax_brackets import MONTHS_PER_YEAR, TaxBracketEvaluator
from tce_engines.tracer import traced_engine
from tce_kernel.domain.schedule import CostSchedule
from tce_kernel.domain.values import Currency, Money
from tce_kernel.logging_config import get_logger, log_context

logger = get_logger("engines.cost_composer")

# Labor-law constants
OVERTIME_PREMIUM = Decimal("1.4")
SEVERANCE_MONTHS_PER_YEAR = Decimal("1")
EIDI_MONTHS_PER_YEAR = Decimal("2")
LEAVE_REDEMPTION_DAYS_PER_MONTH = Decimal("2.5")
DAYS_PER_MONTH = Decimal("30")

MULTIPLIER_QUANTUM = Decimal("0.0001")

_ZERO = Decimal("0")


class ContractMode(str, Enum):
    """How ``base_salary`` is interpreted."""

    GROSS = "gross"  # base_salary is the insurable base pay
    NET = "net"  # base_salary is the guaranteed take-home pay


INSURABLE_ALLOWANCE_FIELDS = (
    "job_absorption",
    "responsibility_allowance",
    "job_superlative",
)

FIXED_ALLOWANCE_FIELDS = (
    "housing_allowance",
    "grocery_allowance",
    "children_allowance",
    "other_benefits",
)

MONETARY_FIELDS = (
    "base_salary",
    *INSURABLE_ALLOWANCE_FIELDS,
    *FIXED_ALLOWANCE_FIELDS,
    "monthly_performance",
    "monthly_bonus",
    "supplementary_insurance",
    "annual_occasional_benefits",
    "recruitment_cost",
    "training_cost",
    "misc_cost",
)

HOUR_FIELDS = ("overtime_base_hours", "overtime_hours")


@dataclass(frozen=True)
class CompensationInput:
    """
    Caller-supplied compensation record.

    Monetary amounts are in the schedule currency.  Amounts may be given
    as Decimal, int or str; floats are rejected.  Range checks belong to
    ``tce_engines.validation``, not to construction.
    """

    contract_mode: ContractMode = ContractMode.GROSS
    base_salary: Decimal = _ZERO

    # Insurable allowances (gross contracts only)
    job_absorption: Decimal = _ZERO
    responsibility_allowance: Decimal = _ZERO
    job_superlative: Decimal = _ZERO

    # Non-insurable fixed allowances
    housing_allowance: Decimal = _ZERO
    grocery_allowance: Decimal = _ZERO
    children_allowance: Decimal = _ZERO
    other_benefits: Decimal = _ZERO

    # Variable pay
    overtime_base_hours: Decimal = Decimal("176")
    overtime_hours: Decimal = _ZERO
    monthly_performance: Decimal = _ZERO
    monthly_bonus: Decimal = _ZERO

    # Annual and welfare
    supplementary_insurance: Decimal = _ZERO
    annual_occasional_benefits: Decimal = _ZERO

    # Hidden HR costs (monthly pass-through)
    recruitment_cost: Decimal = _ZERO
    training_cost: Decimal = _ZERO
    misc_cost: Decimal = _ZERO

    def __post_init__(self) -> None:
        mode = self.contract_mode
        if not isinstance(mode, ContractMode):
            # "NET", "net" and " Net " all name the same mode
            if isinstance(mode, str):
                mode = mode.strip().lower()
            object.__setattr__(self, "contract_mode", ContractMode(mode))
        for name in (*MONETARY_FIELDS, *HOUR_FIELDS):
            value = getattr(self, name)
            if isinstance(value, float):
                raise TypeError(f"{name} must not be float; use Decimal, int or str")
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

    @classmethod
    def with_defaults(cls, schedule: CostSchedule, **overrides: Any) -> Self:
        """Create an input pre-filled with the schedule's statutory allowance floors."""
        defaults = schedule.allowance_defaults
        values: dict[str, Any] = {
            "housing_allowance": defaults.housing_allowance,
            "grocery_allowance": defaults.grocery_allowance,
            "children_allowance": defaults.children_allowance,
            "overtime_base_hours": defaults.overtime_base_hours,
        }
        values.update(overrides)
        return cls(**values)

    @property
    def insurable_allowances(self) -> Decimal:
        return sum((getattr(self, n) for n in INSURABLE_ALLOWANCE_FIELDS), _ZERO)

    @property
    def fixed_allowances(self) -> Decimal:
        return sum((getattr(self, n) for n in FIXED_ALLOWANCE_FIELDS), _ZERO)


@dataclass(frozen=True)
class CostBreakdown:
    """
    Monthly cost breakdown for one compensation input.

    Money fields are rounded to the currency's smallest unit; each is
    rounded independently from the unrounded intermediate values.
    """

    contract_mode: ContractMode
    currency: Currency

    effective_gross_base: Money
    insurable_gross: Money
    total_gross_salary: Money

    overtime_pay: Money
    variable_pay_total: Money

    monthly_income_tax: Money
    employee_insurance_contribution: Money

    employer_insurance_contribution: Money
    employer_income_tax_burden: Money
    severance_accrual: Money
    eidi_accrual: Money
    leave_redemption_accrual: Money
    total_statutory_cost: Money

    monthly_occasional_benefits: Money
    total_welfare_cost: Money
    total_hidden_hr_cost: Money

    total_monthly_cost: Money
    net_salary: Money
    cost_multiplier: Decimal

    gross_up: GrossUpResult | None = None

    @property
    def converged(self) -> bool:
        """False only when a net contract's gross-up missed its tolerance."""
        return self.gross_up is None or self.gross_up.converged

    def as_dict(self) -> dict[str, str]:
        """Flat name -> amount mapping for presentation layers."""
        out: dict[str, str] = {
            "contract_mode": self.contract_mode.value,
            "currency": self.currency.code,
        }
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Money):
                out[f.name] = str(value.amount)
        out["cost_multiplier"] = str(self.cost_multiplier)
        out["converged"] = str(self.converged).lower()
        return out


class CostComposer:
    """
    Composes the Total Cost of Employment for one schedule.

    Contract:
        No I/O, no shared mutable state; one instance may serve concurrent
        callers.
    Guarantees:
        - ``total_monthly_cost`` = total gross + variable pay + statutory
          + welfare + hidden HR cost.
        - ``cost_multiplier`` is zero when net salary is not positive.
    """

    def __init__(
        self,
        schedule: CostSchedule | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        if schedule is None:
            from tce_config import get_active_schedule

            schedule = get_active_schedule()
        self._schedule = schedule
        self._tax = TaxBracketEvaluator(schedule.tax_brackets)
        self._solver = GrossUpSolver(
            self._tax,
            employee_insurance_rate=schedule.insurance.employee_rate,
            max_iterations=max_iterations,
            tolerance=schedule.currency.rounding_tolerance,
        )

    @property
    def schedule(self) -> CostSchedule:
        return self._schedule

    @property
    def tax_evaluator(self) -> TaxBracketEvaluator:
        return self._tax

    @property
    def solver(self) -> GrossUpSolver:
        return self._solver

    @traced_engine("cost_composer", "1.0", fingerprint_fields=("compensation",))
    def compose(
        self,
        compensation: CompensationInput,
        strict: bool = False,
    ) -> CostBreakdown:
        """
        Compute the monthly cost breakdown.

        Args:
            compensation: The compensation record.
            strict: Raise GrossUpNotConvergedError instead of flagging it.

        Returns:
            CostBreakdown
        """
        schedule = self._schedule
        with log_context(schedule_id=schedule.schedule_id, schedule_version=schedule.version):
            return self._compose(compensation, strict)

    def _compose(self, compensation: CompensationInput, strict: bool) -> CostBreakdown:
        schedule = self._schedule
        rates = schedule.insurance
        is_net = compensation.contract_mode == ContractMode.NET

        logger.info("cost_composition_started", extra={
            "contract_mode": compensation.contract_mode.value,
            "base_salary": str(compensation.base_salary),
        })

        # 1. Effective base
        gross_up: GrossUpResult | None = None
        if is_net:
            gross_up = self._solver.gross_up_from_net(compensation.base_salary, strict=strict)
            effective_base = gross_up.gross
            insurable_allowances = _ZERO
            if compensation.insurable_allowances != _ZERO:
                # TODO: confirm with product whether net contracts may itemize allowances
                logger.warning("net_mode_allowances_discarded", extra={
                    "job_absorption": str(compensation.job_absorption),
                    "responsibility_allowance": str(compensation.responsibility_allowance),
                    "job_superlative": str(compensation.job_superlative),
                })
        else:
            effective_base = compensation.base_salary
            insurable_allowances = compensation.insurable_allowances

        # 2-3. Insurable and total gross
        insurable_gross = effective_base + insurable_allowances
        total_gross = insurable_gross + compensation.fixed_allowances

        # 4-5. Variable pay
        if compensation.overtime_base_hours > _ZERO:
            hourly_rate = insurable_gross / compensation.overtime_base_hours
        else:
            hourly_rate = _ZERO
        overtime_pay = hourly_rate * OVERTIME_PREMIUM * compensation.overtime_hours
        variable_pay = (
            overtime_pay + compensation.monthly_performance + compensation.monthly_bonus
        )

        # 6. Income tax on the insurable base only
        income_tax = self._tax.monthly_tax(insurable_gross)
        employee_insurance = insurable_gross * rates.employee_rate

        # 7. Employer statutory costs
        if is_net:
            employer_rate = rates.net_contract_employer_rate
            employer_tax_burden = income_tax
        else:
            employer_rate = rates.employer_rate
            employer_tax_burden = _ZERO
        employer_insurance = insurable_gross * employer_rate
        severance = effective_base * SEVERANCE_MONTHS_PER_YEAR / MONTHS_PER_YEAR
        eidi = effective_base * EIDI_MONTHS_PER_YEAR / MONTHS_PER_YEAR
        leave_redemption = effective_base / DAYS_PER_MONTH * LEAVE_REDEMPTION_DAYS_PER_MONTH
        total_statutory = employer_insurance + severance + eidi + leave_redemption

        # 8-9. Welfare and hidden HR
        occasional = compensation.annual_occasional_benefits / MONTHS_PER_YEAR
        total_welfare = compensation.supplementary_insurance + occasional
        total_hidden = (
            compensation.recruitment_cost
            + compensation.training_cost
            + compensation.misc_cost
        )

        # 10. Aggregate
        total_monthly = total_gross + variable_pay + total_statutory + total_welfare + total_hidden

        # 11. Net salary
        if is_net:
            net_salary = compensation.base_salary
        else:
            net_salary = total_gross - employee_insurance - income_tax

        # 12. Multiplier
        if net_salary > _ZERO:
            multiplier = (total_monthly / net_salary).quantize(
                MULTIPLIER_QUANTUM, rounding=ROUND_HALF_UP
            )
        else:
            multiplier = _ZERO

        money = self._money
        breakdown = CostBreakdown(
            contract_mode=compensation.contract_mode,
            currency=schedule.currency,
            effective_gross_base=money(effective_base),
            insurable_gross=money(insurable_gross),
            total_gross_salary=money(total_gross),
            overtime_pay=money(overtime_pay),
            variable_pay_total=money(variable_pay),
            monthly_income_tax=money(income_tax),
            employee_insurance_contribution=money(employee_insurance),
            employer_insurance_contribution=money(employer_insurance),
            employer_income_tax_burden=money(employer_tax_burden),
            severance_accrual=money(severance),
            eidi_accrual=money(eidi),
            leave_redemption_accrual=money(leave_redemption),
            total_statutory_cost=money(total_statutory),
            monthly_occasional_benefits=money(occasional),
            total_welfare_cost=money(total_welfare),
            total_hidden_hr_cost=money(total_hidden),
            total_monthly_cost=money(total_monthly),
            net_salary=money(net_salary),
            cost_multiplier=multiplier,
            gross_up=gross_up,
        )

        logger.info("cost_composition_completed", extra={
            "contract_mode": compensation.contract_mode.value,
            "insurable_gross": str(breakdown.insurable_gross.amount),
            "total_monthly_cost": str(breakdown.total_monthly_cost.amount),
            "net_salary": str(breakdown.net_salary.amount),
            "cost_multiplier": str(multiplier),
            "converged": breakdown.converged,
        })

        return breakdown

    def _money(self, amount: Decimal) -> Money:
        return Money(amount=amount, currency=self._schedule.currency).round()


def compose(
    compensation: CompensationInput,
    schedule: CostSchedule | None = None,
    strict: bool = False,
) -> CostBreakdown:
    """
    Compose a cost breakdown with a one-off composer.

    Uses the active schedule when ``schedule`` is omitted.
    """
    return CostComposer(schedule).compose(compensation, strict=strict)


def switch_mode(compensation: CompensationInput, mode: ContractMode) -> CompensationInput:
    """Copy of ``compensation`` under another contract mode, other fields unchanged."""
    return replace(compensation, contract_mode=mode)
