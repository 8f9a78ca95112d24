from decimal import Decimal

import pytest

from marketplace.domain.errors import CurrencyMismatch, InvalidAmount, InvalidCurrency
from marketplace.domain.value_objects import Currency, Money


@pytest.mark.unit
class TestMoneyUnit:
    def test_amount_is_stored_as_cents(self):
        money = Money("10.5", "USD")
        assert money.amount == Decimal("10.50")
        assert money.currency == Currency.USD

    def test_accepts_currency_member(self):
        assert Money(Decimal("3"), Currency.MAD).currency == "MAD"

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("-0.01", "USD")

    def test_more_than_two_decimals_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("10.005", "USD")

    def test_non_numeric_amount_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("ten", "USD")

    def test_unknown_currency_rejected(self):
        with pytest.raises(InvalidCurrency):
            Money("1.00", "XYZ")

    def test_add(self):
        assert Money("10.00", "USD").add(Money("5.50", "USD")) == Money("15.50", "USD")

    def test_add_currency_mismatch(self):
        with pytest.raises(CurrencyMismatch):
            Money("10.00", "USD").add(Money("5.50", "EUR"))

    def test_subtract(self):
        assert Money("10.00", "EUR").subtract(Money("2.25", "EUR")) == Money("7.75", "EUR")

    def test_subtract_below_zero_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("1.00", "USD").subtract(Money("2.00", "USD"))

    def test_subtract_currency_mismatch(self):
        with pytest.raises(CurrencyMismatch):
            Money("10.00", "USD").subtract(Money("1.00", "GBP"))

    def test_multiply_by_integer(self):
        assert Money("10.00", "USD").multiply(2) == Money("20.00", "USD")

    def test_multiply_by_decimal_rounds_half_up(self):
        # 0.15 * 0.5 = 0.075 -> 0.08
        assert Money("0.15", "USD").multiply(Decimal("0.5")) == Money("0.08", "USD")

    def test_multiply_by_zero(self):
        assert Money("10.00", "USD").multiply(0) == Money.zero("USD")

    def test_multiply_negative_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("10.00", "USD").multiply(-1)

    def test_multiply_float_rejected(self):
        with pytest.raises(InvalidAmount):
            Money("10.00", "USD").multiply(1.5)

    def test_multiply_keeps_currency(self):
        assert Money("1.00", "JPY").multiply(3).currency == Currency.JPY

    def test_equals(self):
        assert Money("10.00", "USD").equals(Money("10", "USD"))
        assert not Money("10.00", "USD").equals(Money("10.01", "USD"))

    def test_equals_currency_mismatch(self):
        with pytest.raises(CurrencyMismatch):
            Money("10.00", "USD").equals(Money("10.00", "EUR"))

    def test_total(self):
        amounts = [Money("10.00", "USD").multiply(2), Money("5.50", "USD")]
        assert Money.total(amounts, "USD") == Money("25.50", "USD")

    def test_operations_return_new_values(self):
        original = Money("10.00", "USD")
        original.add(Money("1.00", "USD"))
        assert original.amount == Decimal("10.00")

    def test_to_dict(self):
        assert Money("4.2", "GBP").to_dict() == {"amount": "4.20", "currency": "GBP"}
