"""
test_fixed_point.py - Unit tests for FixedPointNumber

Tests:
- Construction from int, str, Decimal, float
- from_inner / to_inner round trips for chain integers
- Arithmetic: alignment, multiplication scale, truncating division
- Equality, ordering and hashing by value
- Rendering: to_string, to_fixed, to_decimal
"""

import pytest
from decimal import Decimal

from ledger_sdk import FixedPointNumber


FP = FixedPointNumber


class TestConstruction:
    """Tests for building numbers from human values."""

    def test_from_int(self):
        """Integers have precision 0."""
        n = FP(42)
        assert n.inner == 42
        assert n.precision == 0

    def test_from_string_keeps_digits(self):
        """String input keeps exactly the written fractional digits."""
        n = FP("1.2300")
        assert n.inner == 12300
        assert n.precision == 4

    def test_from_decimal(self):
        n = FP(Decimal("-0.005"))
        assert n.inner == -5
        assert n.precision == 3

    def test_from_float_uses_repr(self):
        """0.1 becomes exactly one tenth, not the binary approximation."""
        assert FP(0.1) == FP("0.1")
        assert FP(0.1).precision == 1

    def test_explicit_precision_widens(self):
        n = FP("1.5", precision=4)
        assert n.inner == 15000

    def test_explicit_precision_truncates_toward_zero(self):
        """Narrowing drops digits without rounding."""
        assert FP("1.999", precision=2) == FP("1.99")
        assert FP("-1.999", precision=2) == FP("-1.99")

    def test_copy_constructor(self):
        original = FP("3.25")
        assert FP(original) == original

    def test_exponent_notation(self):
        assert FP("1E+3") == FP(1000)
        assert FP("1E+3").precision == 0

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError, match="invalid number"):
            FP("abc")

    def test_non_finite_raises(self):
        with pytest.raises(ValueError, match="finite"):
            FP("NaN")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            FP(True)

    def test_negative_precision_rejected(self):
        with pytest.raises(ValueError):
            FP(1, precision=-1)


class TestChainIntegers:
    """Tests for from_inner / to_inner."""

    @pytest.mark.parametrize("raw", [0, 1, 10 ** 18, 98765432109876543210987654321])
    def test_from_inner_round_trips_through_string(self, raw):
        """Display then parse loses nothing."""
        n = FP.from_inner(raw, 18)
        parsed = FP(n.to_string())
        assert parsed == n
        assert parsed.to_inner(18) == raw

    def test_from_inner_scales(self):
        assert FP.from_inner(1_500_000_000_000, 12) == FP("1.5")

    def test_from_inner_accepts_integer_strings(self):
        assert FP.from_inner("1,000,000", 6) == FP(1)

    def test_from_inner_rejects_float(self):
        with pytest.raises(TypeError):
            FP.from_inner(1.5, 12)

    def test_from_inner_rejects_non_integer_string(self):
        with pytest.raises(ValueError):
            FP.from_inner("1.5", 12)

    def test_to_inner_at_other_decimals_truncates(self):
        n = FP("1.23456789")
        assert n.to_inner(4) == 12345
        assert n.to_inner(10) == 12345678900


class TestArithmetic:
    """Tests for exact arithmetic."""

    def test_add_aligns_precision(self):
        result = FP("1.5").add(FP("0.25"))
        assert result == FP("1.75")
        assert result.precision == 2

    def test_sub_may_go_negative(self):
        result = FP(1).sub(FP("1.01"))
        assert result.is_negative()
        assert result == FP("-0.01")

    def test_mul_adds_precisions(self):
        result = FP("1.5").mul(FP("0.25"))
        assert result == FP("0.375")
        assert result.precision == 3

    def test_mul_no_float_error(self):
        """0.1 * 3 is exactly 0.3."""
        assert FP("0.1") * 3 == FP("0.3")

    def test_div_default_precision(self):
        result = FP(1).div(FP(3))
        assert result.precision == 18
        assert result.to_string() == "0." + "3" * 18

    def test_div_truncates_negative_toward_zero(self):
        assert FP(-2).div(FP(3), precision=2) == FP("-0.66")

    def test_div_keeps_larger_operand_precision(self):
        result = FP.from_inner(1, 24).div(FP(1))
        assert result.precision == 24

    def test_div_by_zero_raises(self):
        with pytest.raises(ZeroDivisionError):
            FP(1).div(FP.ZERO)

    def test_max_min(self):
        assert FP("-5").max(FP.ZERO) == FP.ZERO
        assert FP(2).max(FP(7), FP(3)) == FP(7)
        assert FP(2).min(FP(7), FP("-1")) == FP("-1")

    def test_abs_and_neg(self):
        assert FP("-2.5").abs() == FP("2.5")
        assert -FP("2.5") == FP("-2.5")

    def test_operators_accept_plain_numbers(self):
        assert FP("1.5") + 1 == FP("2.5")
        assert 10 - FP(4) == FP(6)
        assert 2 * FP("0.5") == FP.ONE

    def test_set_precision(self):
        assert FP("1.23456").set_precision(2) == FP("1.23")


class TestComparison:
    """Tests for value equality, ordering and hashing."""

    def test_equal_across_precision(self):
        assert FP("1.0") == FP("1.00")
        assert FP("1.0") == 1
        assert FP("1.50") == Decimal("1.5")

    def test_hash_consistent_with_equality(self):
        assert hash(FP("1.0")) == hash(FP("1.000"))
        assert len({FP("2"), FP("2.0"), FP("2.00")}) == 1

    def test_ordering(self):
        values = [FP("0.3"), FP("-1"), FP("0.25"), FP(2)]
        assert sorted(values) == [FP("-1"), FP("0.25"), FP("0.3"), FP(2)]

    def test_not_equal_to_strings(self):
        assert FP(1) != "1"

    def test_truthiness(self):
        assert not FP.ZERO
        assert FP("0.0001")


class TestRendering:
    """Tests for string and Decimal output."""

    def test_to_string_strips_trailing_zeros(self):
        assert FP("1.500").to_string() == "1.5"
        assert str(FP("2.000")) == "2"

    def test_to_string_small_values(self):
        assert FP.from_inner(1, 18).to_string() == "0.000000000000000001"

    def test_to_string_negative(self):
        assert FP("-0.05").to_string() == "-0.05"

    def test_to_fixed_truncates(self):
        assert FP("1.999").to_fixed(2) == "1.99"
        assert FP(3).to_fixed(3) == "3.000"

    def test_to_decimal_exact(self):
        assert FP.from_inner(123, 2).to_decimal() == Decimal("1.23")

    def test_repr(self):
        assert repr(FP("1.50")) == "FixedPointNumber('1.5', precision=2)"
