"""
Unit tests for ledger decimal helpers.

Tests cover:
- Rounding down to storage and asset precision
- Overflow and division guards
- Incoming amount validation
"""

from decimal import Decimal

import pytest

from ingotpool.utils.decimal_utils import (
    MONEY_LIMIT,
    mul_div,
    percent_of,
    quantize_down,
    to_money,
    validate_amount,
)
from ingotpool.utils.exceptions import LedgerArithmeticError, ValidationError


class TestRounding:
    """Test rounding helpers."""

    def test_quantize_down_truncates(self):
        """Rounding never goes up."""
        assert quantize_down(Decimal("1.999"), 2) == Decimal("1.99")

    def test_quantize_down_zero_decimals(self):
        """Zero decimals keeps the integer part."""
        assert quantize_down(Decimal("7.9"), 0) == Decimal("7")

    def test_to_money_keeps_18_digits(self):
        """Values are stored with 18 fractional digits."""
        value = Decimal("1") / Decimal("3")
        result = to_money(value)
        assert result == Decimal("0.333333333333333333")

    def test_to_money_overflow(self):
        """Values beyond the column range are rejected."""
        with pytest.raises(LedgerArithmeticError):
            to_money(MONEY_LIMIT)


class TestMulDiv:
    """Test scaled multiplication."""

    def test_basis_points(self):
        """1000 * 300 / 10000 = 30."""
        assert mul_div(Decimal("1000"), 300, 10000) == Decimal("30")

    def test_rounds_down_once(self):
        """Intermediate product is not rounded."""
        assert mul_div(Decimal("1"), 2, 3) == Decimal("0.666666666666666666")

    def test_division_by_zero(self):
        """Zero denominator raises a ledger arithmetic error."""
        with pytest.raises(LedgerArithmeticError):
            mul_div(Decimal("1"), 1, 0)

    def test_ledger_arithmetic_error_is_arithmetic_error(self):
        """Callers may catch the builtin ArithmeticError."""
        with pytest.raises(ArithmeticError):
            mul_div(Decimal("1"), 1, 0)

    def test_percent_of(self):
        """5% of 1000 is 50."""
        assert percent_of(Decimal("1000"), 5) == Decimal("50")


class TestValidateAmount:
    """Test incoming amount validation."""

    def test_valid_amount(self):
        """Positive amount within precision passes."""
        assert validate_amount(Decimal("1000.5"), 6) == Decimal("1000.5")

    def test_string_amount_converted(self):
        """Numeric strings are accepted."""
        assert validate_amount("12.25", 2) == Decimal("12.25")

    def test_trailing_zeros_allowed(self):
        """Trailing zeros do not count as precision."""
        assert validate_amount(Decimal("5.000"), 0) == Decimal("5.000")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("NaN")])
    def test_non_positive_rejected(self, amount):
        """Zero, negative and NaN amounts are invalid."""
        with pytest.raises(ValidationError):
            validate_amount(amount, 18)

    def test_not_a_number(self):
        """Garbage input is invalid."""
        with pytest.raises(ValidationError):
            validate_amount("abc", 18)

    def test_excess_precision_rejected(self):
        """More fractional digits than the asset supports is invalid."""
        with pytest.raises(ValidationError) as exc_info:
            validate_amount(Decimal("1.001"), 2)
        assert exc_info.value.context["decimals"] == 2

    def test_overflow_rejected(self):
        """Amounts beyond the column range are rejected."""
        with pytest.raises(LedgerArithmeticError):
            validate_amount(MONEY_LIMIT, 0)
