"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from marketstock.domain.exceptions import ValidationError
from marketstock.domain.model.value_objects import KilogramDelta, Money


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("3.60"))
        assert m.amount == Decimal("3.60")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("2.99").amount == Decimal("2.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("three")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(1.5)

    @pytest.mark.parametrize("amount", ["Infinity", "-Infinity", "NaN", "sNaN"])
    def test_non_finite_amount_rejected(self, amount):
        with pytest.raises(ValidationError, match="must be finite"):
            Money.of(amount)

    def test_marked_up_rounds_to_cents(self):
        assert Money.of("3.00").marked_up(Decimal("1.2")) == Money.of("3.60")
        assert Money.of("1.99").marked_up(Decimal("1.2")) == Money.of("2.39")

    def test_marked_up_rounds_half_up(self):
        # 0.125 * 1 would be banker's-rounded to 0.12
        assert Money.of("0.125").marked_up(Decimal("1")) == Money.of("0.13")

    def test_marked_up_rejects_non_positive_rate(self):
        with pytest.raises(ValidationError, match="Markup rate"):
            Money.of("3").marked_up(Decimal("0"))

    def test_display(self):
        assert str(Money.of("3.6")) == "$3.60"


# ── KilogramDelta ────────────────────────────────────────────────────────────


class TestKilogramDelta:

    def test_negative_is_reservation(self):
        d = KilogramDelta(-2.5)
        assert d.is_reservation
        assert d.magnitude == 2.5

    def test_positive_is_release(self):
        d = KilogramDelta(4)
        assert not d.is_reservation
        assert d.value == 4.0
        assert isinstance(d.value, float)

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="non-zero"):
            KilogramDelta(0)

    @pytest.mark.parametrize(
        "value",
        [float("nan"), float("inf"), float("-inf"), Decimal("sNaN"), Decimal("Infinity")],
    )
    def test_non_finite_rejected(self, value):
        with pytest.raises(ValidationError, match="finite"):
            KilogramDelta(value)

    @pytest.mark.parametrize("value", ["3", None, True])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(ValidationError, match="must be a number"):
            KilogramDelta(value)

    def test_display(self):
        assert str(KilogramDelta(-3)) == "-3 kg"
