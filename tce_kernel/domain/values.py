"""
Values -- Monetary value objects for cost breakdowns.

Responsibility:
    Currency and Money, the types every cost figure is reported in.
    Calculations run on plain Decimals; a figure becomes Money once, at
    the output boundary, where it is rounded to the currency's smallest
    unit.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Depends only on tce_kernel.domain.currency.

Invariants enforced:
    - Amounts are Decimal; floats are refused at construction
    - Currency codes must be registered
    - Rounding precision comes from the currency registry

Failure modes:
    - TypeError for a float amount or a currency of the wrong type
    - ValueError for an unparseable amount or an unregistered code
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tce_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """Registered currency code, uppercased on construction."""

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Unsupported currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        """One smallest unit: 1 for IRR, 0.01 for USD."""
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    @property
    def name(self) -> str:
        info = CurrencyRegistry.get_info(self.code)
        return info.name if info else self.code

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """
    A cost figure in one currency.

    Money never rounds itself; ``round()`` returns the figure at the
    currency's precision, and the composer calls it exactly once per
    breakdown field.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        amount = self.amount
        if isinstance(amount, float):
            raise TypeError("Money amount must not be float; use Decimal, int or str")
        if not isinstance(amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(amount)))
            except InvalidOperation as e:
                raise ValueError(f"Invalid amount: {amount!r}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """Shorthand used by callers and tests: ``Money.of("78166667", "IRR")``."""
        return cls(amount=amount, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's smallest unit (half-up unless told otherwise)."""
        info = CurrencyRegistry.get_info(self.currency.code)
        quantum = Decimal(info.quantize_string) if info else self.currency.rounding_tolerance
        return Money(amount=self.amount.quantize(quantum, rounding=rounding), currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
