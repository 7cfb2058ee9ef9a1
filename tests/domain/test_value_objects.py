"""Unit tests for Money and Quantity."""

from decimal import Decimal

import pytest

from farmsales.domain.exceptions import ValidationError
from farmsales.domain.model.value_objects import Money, Quantity, format_quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_defaults_to_rupees(self):
        price = Money(Decimal("150.00"))
        assert price.amount == Decimal("150.00")
        assert price.currency == "LKR"

    def test_of_parses_user_input(self):
        assert Money.of("249.75").amount == Decimal("249.75")
        assert Money.of(12).amount == Decimal("12")

    def test_of_rejects_unparseable_input(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("a basket")

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-0.01"))

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Money(Decimal("NaN"))

    def test_float_rejected(self):
        with pytest.raises(ValidationError, match="Expected a Decimal"):
            Money(99.9)

    def test_line_total_arithmetic(self):
        line = Money.of("120.50") * 4
        assert line == Money.of("482.00")
        assert line + Money.of("18") == Money.of("500.00")
        assert line - Money.of("82") == Money.of("400.00")

    def test_taking_more_than_available_rejected(self):
        with pytest.raises(ValidationError, match="Cannot take"):
            Money.of("300") - Money.of("300.01")

    def test_price_per_kg_times_weight_rounds_to_the_cent(self):
        assert Money.of("150.00") * Decimal("2.5") == Money.of("375.00")
        assert Money.of("99.99") * Decimal("0.3") == Money.of("30.00")

    def test_multiplying_by_bool_rejected(self):
        with pytest.raises(TypeError):
            Money.of("10") * True

    def test_currencies_never_mix(self):
        with pytest.raises(ValidationError, match="Currency mismatch"):
            Money(Decimal("10"), "LKR") + Money(Decimal("5"), "USD")
        with pytest.raises(ValidationError, match="Currency mismatch"):
            Money(Decimal("10"), "LKR") < Money(Decimal("5"), "USD")

    def test_vat_rounds_half_up_to_the_cent(self):
        rate = Decimal("0.18")
        assert Money.of("1000").apply_rate(rate) == Money.of("180.00")
        assert Money.of("0.25").apply_rate(rate) == Money.of("0.05")
        assert Money.of("33.33").apply_rate(rate) == Money.of("6.00")

    def test_is_zero(self):
        assert Money.zero().is_zero
        assert Money.of("0.000").is_zero
        assert not Money.of("0.01").is_zero

    def test_rendered_as_rupees(self):
        assert str(Money.of("1180")) == "Rs 1180.00"
        assert str(Money.of("0.5")) == "Rs 0.50"

    def test_ordering(self):
        collected, total = Money.of("400"), Money.of("1180")
        assert collected < total
        assert total > collected
        assert total >= Money.of("1180.00")
        assert collected <= collected
        assert not total <= collected


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_accepts_whole_units(self):
        assert Quantity(12).value == Decimal("12")

    def test_accepts_weights(self):
        assert Quantity("2.5").value == Decimal("2.5")
        assert Quantity(Decimal("0.1")).value == Decimal("0.1")
        assert Quantity("4").value == Decimal("4")

    @pytest.mark.parametrize("bad", [0, -3, "-0.5"])
    def test_zero_or_negative_rejected(self, bad):
        with pytest.raises(ValidationError, match="greater than 0"):
            Quantity(bad)

    @pytest.mark.parametrize("bad", [True, "a crate", None])
    def test_non_numbers_rejected(self, bad):
        with pytest.raises(ValidationError, match="must be a number"):
            Quantity(bad)

    def test_infinity_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Quantity("Infinity")

    def test_renders_as_plain_number(self):
        assert str(Quantity(40)) == "40"
        assert str(Quantity("7.50")) == "7.5"


def test_format_quantity_drops_trailing_zeros():
    assert format_quantity(Decimal("10.0")) == "10"
    assert format_quantity(Decimal("0.10")) == "0.1"
    assert format_quantity(Decimal("-0")) == "0"
