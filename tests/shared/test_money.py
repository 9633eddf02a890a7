"""Tests for currency arithmetic helpers."""

from decimal import Decimal

from storefront.shared.money import prices_match, quantize, to_amount, to_decimal, to_minor_units


class TestQuantize:
    def test_rounds_half_up(self):
        assert quantize("10.005") == Decimal("10.01")
        assert quantize("10.004") == Decimal("10.00")

    def test_accepts_floats_without_binary_noise(self):
        assert quantize(0.1 + 0.2) == Decimal("0.30")

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")


class TestConversions:
    def test_to_amount_returns_float_cents(self):
        assert to_amount(Decimal("130.199")) == 130.2

    def test_to_minor_units(self):
        assert to_minor_units(130.2) == 13020
        assert to_minor_units(Decimal("0.015")) == 2

    def test_prices_match_within_a_cent(self):
        assert prices_match(19.99, 20.00)
        assert not prices_match(19.98, 20.00)
