"""
Hypothesis-based property tests for the cost pipeline.

Properties checked:
- Tax is continuous and non-decreasing in income
- Gross-up is the inverse of the net calculation within one rial
- Below the exempt band, gross-up is exactly net / (1 - employee rate)
- Total cost is non-decreasing in every monetary input (gross contracts)
- Total cost grows with the guaranteed net and is non-decreasing in every
  other input (net contracts)
- A gross contract and the net contract built from its net salary agree
  on the gross base
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from tce_config import get_active_schedule
from tce_engines.cost_composer import (
    HOUR_FIELDS,
    MONETARY_FIELDS,
    CompensationInput,
    ContractMode,
    CostComposer,
    switch_mode,
)

SCHEDULE = get_active_schedule(as_of=date(2025, 1, 1))
COMPOSER = CostComposer(SCHEDULE)
TAX = COMPOSER.tax_evaluator
SOLVER = COMPOSER.solver

ONE_RIAL = Decimal("1")
EXEMPT_MONTHLY_NET = Decimal("130200000")

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)

rials = st.integers(min_value=0, max_value=2_000_000_000).map(Decimal)
positive_rials = st.integers(min_value=1_000_000, max_value=1_000_000_000).map(Decimal)
# Overtime base hours is a divisor, so raising it lowers cost
increasing_fields = st.sampled_from(
    [*MONETARY_FIELDS, *(h for h in HOUR_FIELDS if h != "overtime_base_hours")]
)
# A one-rial step in the guaranteed net is inside the solver tolerance, so
# net contracts vary base_salary only in coarse steps (see test_net_cost_grows_with_net)
net_contract_fields = st.sampled_from(
    [f for f in MONETARY_FIELDS if f != "base_salary"] + ["overtime_hours"]
)


@st.composite
def compensation_inputs(draw, mode=ContractMode.GROSS):
    return CompensationInput(
        contract_mode=mode,
        base_salary=draw(positive_rials),
        job_absorption=draw(st.integers(0, 20_000_000)),
        housing_allowance=draw(st.integers(0, 20_000_000)),
        grocery_allowance=draw(st.integers(0, 10_000_000)),
        overtime_hours=draw(st.integers(0, 60)),
        monthly_bonus=draw(st.integers(0, 50_000_000)),
        annual_occasional_benefits=draw(st.integers(0, 120_000_000)),
        training_cost=draw(st.integers(0, 5_000_000)),
    )


class TestTaxProperties:
    @given(income=rials)
    @PROPERTY_SETTINGS
    def test_non_decreasing_and_continuous(self, income):
        step = Decimal("1")
        delta = TAX.monthly_tax(income + step) - TAX.monthly_tax(income)
        # last-digit slack from Decimal division by 12
        assert Decimal("0") <= delta <= TAX.table.top_rate * step + Decimal("1e-12")

    @given(income=rials)
    @PROPERTY_SETTINGS
    def test_bounded_by_top_rate(self, income):
        tax = TAX.monthly_tax(income)
        assert Decimal("0") <= tax <= income * TAX.table.top_rate


class TestGrossUpProperties:
    @given(net=st.integers(min_value=1_000_000, max_value=500_000_000).map(Decimal))
    @PROPERTY_SETTINGS
    def test_inverse_of_net_calculation(self, net):
        result = SOLVER.gross_up_from_net(net)

        assert result.converged
        assert abs(SOLVER.calculated_net(result.gross) - net) < ONE_RIAL
        assert result.gross >= net

    @given(net=st.integers(min_value=1, max_value=int(EXEMPT_MONTHLY_NET)).map(Decimal))
    @PROPERTY_SETTINGS
    def test_exempt_band_closed_form(self, net):
        result = SOLVER.gross_up_from_net(net)

        assert result.iterations == 0
        assert abs(result.gross - net / Decimal("0.93")) < ONE_RIAL
        assert TAX.monthly_tax(result.gross) == Decimal("0")


class TestCompositionProperties:
    @given(comp=compensation_inputs(), field=increasing_fields,
           delta=st.integers(min_value=1, max_value=50_000_000))
    @PROPERTY_SETTINGS
    def test_gross_cost_monotone_in_every_input(self, comp, field, delta):
        bumped = replace(comp, **{field: getattr(comp, field) + delta})
        before = COMPOSER.compose(comp).total_monthly_cost.amount
        after = COMPOSER.compose(bumped).total_monthly_cost.amount
        assert after >= before

    @given(comp=compensation_inputs(ContractMode.NET), field=net_contract_fields,
           delta=st.integers(min_value=1, max_value=50_000_000))
    @PROPERTY_SETTINGS
    def test_net_cost_monotone_in_every_input(self, comp, field, delta):
        """Same guaranteed net, larger allowance or cost: never cheaper."""
        bumped = replace(comp, **{field: getattr(comp, field) + delta})
        before = COMPOSER.compose(comp)
        after = COMPOSER.compose(bumped)

        assert after.effective_gross_base == before.effective_gross_base
        assert after.total_monthly_cost.amount >= before.total_monthly_cost.amount

    @given(net=positive_rials, step=st.integers(min_value=1_000, max_value=100_000_000))
    @PROPERTY_SETTINGS
    def test_net_cost_grows_with_net(self, net, step):
        low = COMPOSER.compose(CompensationInput(contract_mode=ContractMode.NET, base_salary=net))
        high = COMPOSER.compose(
            CompensationInput(contract_mode=ContractMode.NET, base_salary=net + step)
        )
        assert high.total_monthly_cost.amount > low.total_monthly_cost.amount
        assert high.effective_gross_base.amount > low.effective_gross_base.amount

    @given(gross=positive_rials)
    @PROPERTY_SETTINGS
    def test_mode_round_trip(self, gross):
        gross_contract = CompensationInput(contract_mode=ContractMode.GROSS, base_salary=gross)
        net_salary = COMPOSER.compose(gross_contract).net_salary.amount

        net_contract = switch_mode(CompensationInput(base_salary=net_salary), ContractMode.NET)
        solved = COMPOSER.compose(net_contract)

        assert solved.converged
        assert abs(solved.effective_gross_base.amount - gross) <= Decimal("3")

    @given(comp=compensation_inputs())
    @PROPERTY_SETTINGS
    def test_gross_multiplier_at_least_one(self, comp):
        breakdown = COMPOSER.compose(comp)
        assert breakdown.cost_multiplier >= Decimal("1")
        assert breakdown.total_monthly_cost.amount >= breakdown.total_gross_salary.amount
