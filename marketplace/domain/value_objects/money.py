"""
Money value object.

Fixed-point, currency-tagged amounts. Every operation returns a new value and
arithmetic between two amounts requires the same currency.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

from django.db import models

from marketplace.domain.errors import CurrencyMismatch, InvalidAmount, InvalidCurrency

CENT = Decimal("0.01")


class Currency(models.TextChoices):
    USD = "USD", "US Dollar"
    EUR = "EUR", "Euro"
    GBP = "GBP", "British Pound"
    JPY = "JPY", "Japanese Yen"
    MAD = "MAD", "Moroccan Dirham"


def _to_decimal(value: Union[Decimal, int, str, float]) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Amount must be numeric, got {value!r}")
    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return amount


@dataclass(frozen=True)
class Money:
    """
    An amount with at most two fractional digits in a recognized currency.

    Attributes:
        amount: Non-negative Decimal, stored quantized to cents
        currency: One of ``Currency``

    Example:
        >>> str(Money("10.00", "USD").multiply(2).add(Money("5.50", "USD")))
        '25.50 USD'
    """

    amount: Decimal
    currency: str = Currency.USD

    def __post_init__(self):
        amount = _to_decimal(self.amount)
        if amount < 0:
            raise InvalidAmount(f"Amount cannot be negative: {amount}")
        if amount != amount.quantize(CENT, rounding=ROUND_HALF_UP):
            raise InvalidAmount(f"Amount cannot have more than 2 decimal places: {amount}")

        try:
            currency = Currency(self.currency)
        except ValueError:
            valid = ", ".join(Currency.values)
            raise InvalidCurrency(f"Invalid currency {self.currency!r}. Must be one of: {valid}")

        object.__setattr__(self, "amount", amount.quantize(CENT))
        object.__setattr__(self, "currency", currency)

    @classmethod
    def zero(cls, currency: str = Currency.USD) -> "Money":
        return cls(Decimal("0"), currency)

    @classmethod
    def total(cls, amounts: Iterable["Money"], currency: str) -> "Money":
        """Sum amounts into ``currency``; any other currency is a mismatch."""
        result = cls.zero(currency)
        for amount in amounts:
            result = result.add(amount)
        return result

    def _require_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatch(self.currency, other.currency)

    def add(self, other: "Money") -> "Money":
        self._require_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._require_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, scalar: Union[int, Decimal]) -> "Money":
        """
        Multiply by a non-negative integer or decimal.

        Decimal factors that produce sub-cent results are rounded half-up to
        the cent.
        """
        if isinstance(scalar, bool) or not isinstance(scalar, (int, Decimal)):
            raise InvalidAmount(f"Multiplier must be an integer or Decimal, got {scalar!r}")
        if scalar < 0:
            raise InvalidAmount(f"Multiplier cannot be negative: {scalar}")
        product = (self.amount * scalar).quantize(CENT, rounding=ROUND_HALF_UP)
        return Money(product, self.currency)

    def equals(self, other: "Money") -> bool:
        self._require_same_currency(other)
        return self.amount == other.amount

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "currency": str(self.currency)}

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"
