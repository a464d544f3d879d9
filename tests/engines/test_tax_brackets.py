"""
Tests for the progressive tax bracket evaluator.

Covers:
- Bracket walk on the shipped table
- Zero-rate exempt band
- Continuity at every bracket boundary
- Negative income clamping
- Injected custom tables
- Table invariants enforced at construction
"""

from decimal import Decimal

import pytest

from tce_engines.tax_brackets import BracketSlice, TaxBracketEvaluator
from tce_kernel.domain.schedule import TaxBracket, TaxBracketTable
from tce_kernel.exceptions import InvalidTaxScheduleError


class TestMonthlyTax:
    """Monthly tax on the shipped bracket table."""

    def test_exempt_band_is_tax_free(self, evaluator):
        """Income inside the first bracket owes nothing."""
        assert evaluator.monthly_tax(Decimal("50000000")) == Decimal("0")
        assert evaluator.monthly_tax(Decimal("140000000")) == Decimal("0")

    def test_second_bracket(self, evaluator):
        """200M/month -> (2.4B - 1.68B) * 10% / 12 = 6M."""
        assert evaluator.monthly_tax(Decimal("200000000")) == Decimal("6000000")

    def test_upper_edge_of_second_bracket(self, evaluator):
        """230M/month reaches exactly 2.76B annual: 108M / 12 = 9M."""
        assert evaluator.monthly_tax(Decimal("230000000")) == Decimal("9000000")

    def test_third_bracket(self, evaluator):
        """300M/month -> 108M + 126M annual = 19.5M monthly."""
        assert evaluator.monthly_tax(Decimal("300000000")) == Decimal("19500000")

    def test_top_bracket(self, evaluator):
        """1.2B/month crosses every bracket: 2,838M annual -> 236.5M monthly."""
        assert evaluator.monthly_tax(Decimal("1200000000")) == Decimal("236500000")

    def test_negative_income_is_zero_tax(self, evaluator):
        """Negative input is clamped, not rejected."""
        assert evaluator.monthly_tax(Decimal("-5000000")) == Decimal("0")

    def test_zero_income(self, evaluator):
        assert evaluator.monthly_tax(Decimal("0")) == Decimal("0")

    def test_monthly_is_one_twelfth_of_annual(self, evaluator):
        monthly = Decimal("345678901")
        assert evaluator.monthly_tax(monthly) == evaluator.annual_tax(monthly * 12) / 12

    def test_no_intermediate_rounding(self, evaluator):
        """Fractional tax survives; rounding belongs to the output boundary."""
        tax = evaluator.monthly_tax(Decimal("140000001"))
        assert Decimal("0") < tax < Decimal("1")


class TestContinuity:
    """Tax amount is continuous across bracket boundaries."""

    @pytest.mark.parametrize("annual_bound", [
        Decimal("1680000000"),
        Decimal("2760000000"),
        Decimal("4320000000"),
        Decimal("7200000000"),
        Decimal("12000000000"),
    ])
    def test_no_jump_at_boundary(self, evaluator, annual_bound):
        """Tax just below and just above a boundary differ by less than a unit."""
        monthly = annual_bound / 12
        epsilon = Decimal("0.01")
        below = evaluator.monthly_tax(monthly - epsilon)
        at = evaluator.monthly_tax(monthly)
        above = evaluator.monthly_tax(monthly + epsilon)

        assert below <= at <= above
        assert above - below < Decimal("0.01")

    def test_rate_jumps_at_boundary(self, evaluator):
        """Marginal rate changes at the boundary even though tax does not."""
        assert evaluator.marginal_rate(Decimal("139999999")) == Decimal("0")
        assert evaluator.marginal_rate(Decimal("140000000")) == Decimal("0.10")


class TestBracketSlices:
    """Per-bracket detail of the walk."""

    def test_slices_for_third_bracket_income(self, evaluator):
        slices = evaluator.slices(Decimal("3600000000"))

        assert len(slices) == 3
        assert all(isinstance(s, BracketSlice) for s in slices)
        assert slices[0].taxable_amount == Decimal("1680000000")
        assert slices[0].tax_amount == Decimal("0")
        assert slices[1].lower_bound == Decimal("1680000000")
        assert slices[1].taxable_amount == Decimal("1080000000")
        assert slices[1].tax_amount == Decimal("108000000")
        assert slices[2].upper_bound == Decimal("4320000000")
        assert slices[2].taxable_amount == Decimal("840000000")
        assert slices[2].tax_amount == Decimal("126000000")

    def test_slices_cover_whole_income(self, evaluator):
        annual = Decimal("20000000000")
        slices = evaluator.slices(annual)
        assert sum(s.taxable_amount for s in slices) == annual
        assert slices[-1].upper_bound is None

    def test_no_slices_for_zero(self, evaluator):
        assert evaluator.slices(Decimal("0")) == ()


class TestRates:
    def test_marginal_rate_top(self, evaluator):
        assert evaluator.marginal_rate(Decimal("1200000000")) == Decimal("0.30")

    def test_effective_rate(self, evaluator):
        assert evaluator.effective_rate(Decimal("200000000")) == Decimal("0.03")

    def test_effective_rate_zero_income(self, evaluator):
        assert evaluator.effective_rate(Decimal("0")) == Decimal("0")


class TestInjectedTable:
    """The evaluator uses whatever table it is given."""

    def test_custom_table(self):
        table = TaxBracketTable.from_pairs([(12000, "0"), (None, "0.5")])
        evaluator = TaxBracketEvaluator(table)

        # annual 24,000 -> 12,000 taxed at 50% = 6,000 -> 500 monthly
        assert evaluator.monthly_tax(Decimal("2000")) == Decimal("500")
        assert evaluator.table is table

    def test_single_flat_bracket(self):
        evaluator = TaxBracketEvaluator(TaxBracketTable.from_pairs([(None, "0.2")]))
        assert evaluator.monthly_tax(Decimal("1000")) == Decimal("200")


class TestTableInvariants:
    """Malformed tables are rejected at construction."""

    def test_empty_table(self):
        with pytest.raises(InvalidTaxScheduleError, match="empty"):
            TaxBracketTable(brackets=())

    def test_last_bracket_must_be_open(self):
        with pytest.raises(InvalidTaxScheduleError, match="open-ended"):
            TaxBracketTable.from_pairs([(1000, "0"), (2000, "0.1")])

    def test_open_bracket_only_last(self):
        with pytest.raises(InvalidTaxScheduleError, match="not the last"):
            TaxBracketTable(brackets=(
                TaxBracket(None, Decimal("0")),
                TaxBracket(None, Decimal("0.1")),
            ))

    def test_bounds_strictly_increasing(self):
        with pytest.raises(InvalidTaxScheduleError, match="does not exceed"):
            TaxBracketTable.from_pairs([(2000, "0"), (2000, "0.1"), (None, "0.2")])

    def test_rates_non_decreasing(self):
        with pytest.raises(InvalidTaxScheduleError, match="lower than preceding"):
            TaxBracketTable.from_pairs([(1000, "0.2"), (None, "0.1")])

    def test_rate_within_unit_interval(self):
        with pytest.raises(InvalidTaxScheduleError, match="outside"):
            TaxBracketTable.from_pairs([(None, "1.5")])

    def test_boundaries_property(self, schedule):
        assert schedule.tax_brackets.boundaries == (
            Decimal("1680000000"),
            Decimal("2760000000"),
            Decimal("4320000000"),
            Decimal("7200000000"),
            Decimal("12000000000"),
        )
