"""Tests for base/display unit conversion and amount formatting."""

from decimal import Decimal

import pytest

from bondmarket.units import (
    BASE_UNITS_PER_DISPLAY,
    format_amount,
    round_display,
    to_base_units,
    to_display_units,
)


class TestToDisplayUnits:
    def test_one_display_unit(self) -> None:
        assert to_display_units(100_000_000) == Decimal("1")

    def test_smallest_unit(self) -> None:
        assert to_display_units(1) == Decimal("0.00000001")

    def test_large_amount_is_exact(self) -> None:
        assert to_display_units(123_456_789_012_345_678) == Decimal("1234567890.12345678")


class TestToBaseUnits:
    def test_whole_amount(self) -> None:
        assert to_base_units(Decimal("10")) == 1_000_000_000

    def test_truncates_sub_base_unit(self) -> None:
        assert to_base_units(Decimal("0.000000019")) == 1

    def test_form_default_min_invest(self) -> None:
        assert to_base_units(Decimal("0.0001")) == 10_000

    def test_input_beyond_context_precision_never_rounds_up(self) -> None:
        # 30 nines: more digits than the default 28-digit Decimal context
        assert to_base_units(Decimal("0." + "9" * 30)) == 99_999_999

    def test_long_whole_and_fraction(self) -> None:
        amount = Decimal("123456789012345678901234." + "9" * 20)
        assert to_base_units(amount) == 12345678901234567890123499999999

    def test_negative_truncates_toward_zero(self) -> None:
        assert to_base_units(Decimal("-0.000000019")) == -1

    def test_exponent_form(self) -> None:
        assert to_base_units(Decimal("1E-8")) == 1
        assert to_base_units(Decimal("2.5E+1")) == 2_500_000_000


class TestRoundTrip:
    @pytest.mark.parametrize("base", [0, 1, 99, 10_000, 123_456_789, 10**17 + 3])
    def test_base_to_display_and_back_is_identity(self, base: int) -> None:
        assert to_base_units(to_display_units(base)) == base

    @pytest.mark.parametrize("base", [1, 99, 150_000_001, 123_456_789])
    def test_six_decimal_display_never_gains_value(self, base: int) -> None:
        shown = round_display(to_display_units(base))
        back = to_base_units(shown)
        assert back <= base
        # Loss is bounded by the two truncated decimal places
        assert base - back < 100

    def test_scale_constant(self) -> None:
        assert BASE_UNITS_PER_DISPLAY == 100_000_000


class TestFormatAmount:
    def test_six_decimals_with_symbol(self) -> None:
        assert format_amount(150_000_000) == "1.500000 APT"

    def test_zero(self) -> None:
        assert format_amount(0) == "0.000000 APT"

    def test_truncates_instead_of_rounding(self) -> None:
        # 0.00000099 would round up to 0.000001
        assert format_amount(99) == "0.000000 APT"

    def test_custom_symbol(self) -> None:
        assert format_amount(250_000_000, "USDC") == "2.500000 USDC"

    def test_no_symbol(self) -> None:
        assert format_amount(250_000_000, "") == "2.500000"
