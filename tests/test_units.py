"""Tests for unit math and display formatting."""

from decimal import Decimal

import pytest

from setquote.errors import InputError
from setquote.units import (
    SCALE,
    ceil_div,
    format_number,
    format_percentage,
    format_units,
    format_usd,
    normalize_token_amount,
    parse_units,
)


class TestParseUnits:
    """Tests for human amount -> base unit conversion."""

    def test_six_decimal_token(self):
        assert parse_units("100", 6) == 100_000_000

    def test_fractional_amount(self):
        assert parse_units("1.5", 18) == 1_500_000_000_000_000_000

    def test_leading_dot(self):
        assert parse_units(".25", 2) == 25

    def test_trailing_zeros_beyond_decimals_allowed(self):
        assert parse_units("1.500000000", 6) == 1_500_000

    @pytest.mark.parametrize("raw", ["abc", "", "-1", "1e18", "1,000", "NaN", "1.2.3"])
    def test_rejects_non_decimal(self, raw):
        with pytest.raises(InputError):
            parse_units(raw, 18)

    def test_long_amount_is_exact(self):
        # 29 significant digits, beyond the default Decimal precision
        assert parse_units("12345678901.123456789012345678", 18) == 12345678901123456789012345678
        assert parse_units("123456789012345678901234567890", 18) == 123456789012345678901234567890 * SCALE

    def test_rejects_excess_precision(self):
        with pytest.raises(InputError, match="decimal places"):
            parse_units("1.1234567", 6)


class TestCeilDiv:
    """Tests for ceiling division."""

    def test_exact(self):
        assert ceil_div(10, 5) == 2

    def test_rounds_up(self):
        assert ceil_div(11, 5) == 3

    @pytest.mark.parametrize(
        "sell_amount,total_supply",
        [
            (100_000_000, 1000 * SCALE),
            (123_456_789, 3 * SCALE + 7),
            (1, 10**30),
            (987_654_321_987_654_321, 1_234_567_890_123_456_789),
        ],
    )
    def test_ceiling_property(self, sell_amount, total_supply):
        units = ceil_div(sell_amount * SCALE, total_supply)

        assert units * total_supply >= sell_amount * SCALE
        assert (units - 1) * total_supply < sell_amount * SCALE


class TestFormatting:
    """Tests for display formatting helpers."""

    def test_format_units(self):
        assert format_units(250_000, 8) == "0.0025"
        assert format_units(100_000_000, 6) == "100"
        assert format_units(0, 18) == "0"

    def test_format_units_long_amount(self):
        assert format_units(12345678901123456789012345678, 18) == "12345678901.123456789012345678"
        assert normalize_token_amount(12345678901123456789012345678, 18) == Decimal(
            "12345678901.123456789012345678"
        )

    def test_format_usd_two_decimals(self):
        assert format_usd(Decimal("1234.567")) == "$1,234.57"
        assert format_usd(0) == "$0.00"
        assert format_usd(-5) == "-$5.00"

    def test_format_usd_significant_digits(self):
        assert format_usd(Decimal("0.0012345"), significant_digits=4) == "$0.001235"
        assert format_usd(Decimal("12345.6"), significant_digits=4) == "$12,350"
        assert format_usd(Decimal("0.5"), significant_digits=4) == "$0.5"

    def test_format_percentage(self):
        assert format_percentage(2) == "2.00%"
        assert format_percentage(Decimal("2.499")) == "2.50%"
        assert format_percentage(Decimal("-0.001")) == "0.00%"

    def test_format_number(self):
        assert format_number(45.0) == "45"
        assert format_number(45.5) == "45.5"
        assert format_number(Decimal("0.10")) == "0.1"
