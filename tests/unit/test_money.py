"""
Unit tests for Money and Currency value objects.

Verifies:
- Float constructor prohibition
- Rounding to the currency's smallest unit
- Rounding determinism
"""

from decimal import ROUND_DOWN, Decimal

import pytest

from tce_kernel.domain.values import Currency, Money


class TestConstruction:
    def test_of_accepts_str_and_int(self):
        assert Money.of("100.50", "USD").amount == Decimal("100.50")
        assert Money.of(50000000, "IRR").amount == Decimal("50000000")

    def test_float_rejected(self):
        with pytest.raises(TypeError, match="float"):
            Money(amount=1.5, currency=Currency("IRR"))

    def test_invalid_string_rejected(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            Money(amount="not a number", currency="IRR")

    def test_currency_from_string(self):
        assert Money(amount=Decimal("1"), currency="irr").currency == Currency("IRR")

    def test_currency_type_checked(self):
        with pytest.raises(TypeError):
            Money(amount=Decimal("1"), currency=364)

    def test_is_zero(self):
        assert Money.of(0, "IRR").is_zero
        assert not Money.of("0.01", "USD").is_zero

    def test_str(self):
        assert str(Money.of("78166667", "IRR")) == "78166667 IRR"
        assert str(Currency("irr")) == "IRR"

    def test_value_equality(self):
        assert Money.of("4166667", "IRR") == Money(Decimal("4166667"), Currency("IRR"))
        assert Money.of("1", "IRR") != Money.of("1", "USD")


class TestRound:
    """Rounding precision comes from the currency."""

    def test_rial_rounds_to_whole_units(self):
        assert Money.of("4166666.6667", "IRR").round().amount == Decimal("4166667")
        assert Money.of("8333333.3333", "IRR").round().amount == Decimal("8333333")

    def test_half_up(self):
        assert Money.of("0.5", "IRR").round().amount == Decimal("1")
        assert Money.of("10.555", "USD").round().amount == Decimal("10.56")

    def test_three_decimal_currency(self):
        assert Money.of("1.23456", "IQD").round().amount == Decimal("1.235")

    def test_explicit_rounding_mode(self):
        assert Money.of("10.559", "USD").round(ROUND_DOWN).amount == Decimal("10.55")

    def test_round_returns_new_instance(self):
        original = Money.of("1.5", "IRR")
        rounded = original.round()
        assert original.amount == Decimal("1.5")
        assert rounded.amount == Decimal("2")

    def test_rounded_cents_keep_exponent(self):
        assert str(Money.of("4650", "USD").round().amount) == "4650.00"

    def test_same_input_same_output(self):
        results = {Money.of("53763440.8602", "IRR").round() for _ in range(100)}
        assert len(results) == 1
