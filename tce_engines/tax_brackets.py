"""
tce_engines.tax_brackets -- Progressive income tax on an injectable bracket table.

Responsibility:
    Compute income tax by walking an ordered table of progressive
    brackets on annualized income.  The table is configuration data
    (see ``tce_config``) and is injected into the evaluator; no rates
    or thresholds are embedded here.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf component: used by
    the gross-up solver and the cost composer.

Invariants enforced:
    - Tax is continuous in income: the rate jumps at a boundary, the
      amount does not.
    - No intermediate rounding; callers round at the output boundary.
    - Negative income is clamped to zero tax.

Failure modes:
    - None.  Every non-negative or negative Decimal input yields a tax.

Usage:
    from decimal import Decimal
    from tce_config import get_active_schedule
    from tce_engines.tax_brackets import TaxBracketEvaluator

    evaluator = TaxBracketEvaluator(get_active_schedule().tax_brackets)
    evaluator.monthly_tax(Decimal("200000000"))  # Decimal("6000000")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tce_kernel.domain.schedule import TaxBracketTable
from tce_kernel.logging_config import get_logger

logger = get_logger("engines.tax_brackets")

MONTHS_PER_YEAR = Decimal("12")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class BracketSlice:
    """Portion of annual income falling in one bracket and the tax on it."""

    lower_bound: Decimal
    upper_bound: Decimal | None
    marginal_rate: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal


class TaxBracketEvaluator:
    """
    Progressive tax on a bracket table.

    Contract:
        Pure functions of the input and the injected table.  Safe to
        share between threads: the table is immutable.
    Guarantees:
        - ``monthly_tax(m) == annual_tax(12 * m) / 12``.
        - ``monthly_tax(m) == 0`` while ``12 * m`` is within the first
          bracket when that bracket's rate is zero.
    """

    def __init__(self, table: TaxBracketTable):
        self._table = table

    @property
    def table(self) -> TaxBracketTable:
        return self._table

    def slices(self, annual_income: Decimal) -> tuple[BracketSlice, ...]:
        """
        Walk the brackets in ascending order and split income across them.

        Stops at the first bracket that fully contains the remaining income.
        """
        if annual_income <= _ZERO:
            return ()

        result: list[BracketSlice] = []
        lower = _ZERO
        for bracket in self._table:
            upper = bracket.upper_bound
            top = annual_income if upper is None else min(annual_income, upper)
            taxable = top - lower
            if taxable > _ZERO:
                result.append(
                    BracketSlice(
                        lower_bound=lower,
                        upper_bound=upper,
                        marginal_rate=bracket.marginal_rate,
                        taxable_amount=taxable,
                        tax_amount=taxable * bracket.marginal_rate,
                    )
                )
            if upper is None or annual_income <= upper:
                break
            lower = upper
        return tuple(result)

    def annual_tax(self, annual_income: Decimal) -> Decimal:
        """Annual tax owed on annual taxable income."""
        return sum((s.tax_amount for s in self.slices(annual_income)), _ZERO)

    def monthly_tax(self, monthly_taxable_income: Decimal) -> Decimal:
        """
        Monthly tax on monthly taxable income.

        Annualizes, applies the bracket walk, and returns one twelfth of the
        annual tax.  Negative input returns zero.
        """
        if monthly_taxable_income <= _ZERO:
            return _ZERO
        annual = monthly_taxable_income * MONTHS_PER_YEAR
        tax = self.annual_tax(annual) / MONTHS_PER_YEAR
        logger.debug("monthly_tax_computed", extra={
            "monthly_taxable_income": str(monthly_taxable_income),
            "monthly_tax": str(tax),
        })
        return tax

    def marginal_rate(self, monthly_taxable_income: Decimal) -> Decimal:
        """Rate applied to the next unit of monthly income."""
        annual = max(monthly_taxable_income, _ZERO) * MONTHS_PER_YEAR
        for bracket in self._table:
            if bracket.upper_bound is None or annual < bracket.upper_bound:
                return bracket.marginal_rate
        return self._table.top_rate

    def effective_rate(self, monthly_taxable_income: Decimal) -> Decimal:
        """Average tax rate (tax / income); zero for non-positive income."""
        if monthly_taxable_income <= _ZERO:
            return _ZERO
        return self.monthly_tax(monthly_taxable_income) / monthly_taxable_income
