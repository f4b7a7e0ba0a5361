"""
Decimal helpers for ledger arithmetic.

Base values are kept at 18 fractional digits and always rounded down,
so no operation can create value out of rounding.
"""

from decimal import ROUND_DOWN, Context, Decimal, InvalidOperation

from ingotpool.utils.exceptions import LedgerArithmeticError, ValidationError


MONEY_SCALE = 18

# DECIMAL(36, 18) leaves 18 integer digits
MONEY_LIMIT = Decimal(10) ** 18

_WIDE_CONTEXT = Context(prec=80)


def quantize_down(value: Decimal, decimals: int) -> Decimal:
    """
    Round a value down to a number of fractional digits.

    Args:
        value: Value to round
        decimals: Fractional digits to keep

    Returns:
        Rounded value
    """
    exponent = Decimal(1).scaleb(-decimals)
    return value.quantize(exponent, rounding=ROUND_DOWN, context=_WIDE_CONTEXT)


def to_money(value: Decimal) -> Decimal:
    """
    Normalize a computed value to storage precision.

    Raises:
        LedgerArithmeticError: If the value does not fit the money column
    """
    try:
        result = quantize_down(value, MONEY_SCALE)
    except InvalidOperation as e:
        raise LedgerArithmeticError(
            f"Amount cannot be represented: {value}"
        ) from e
    if abs(result) >= MONEY_LIMIT:
        raise LedgerArithmeticError(
            f"Amount overflows ledger precision: {value}"
        )
    return result


def mul_div(
    value: Decimal, numerator: Decimal | int, denominator: Decimal | int
) -> Decimal:
    """
    Return ``value * numerator / denominator`` at storage precision.

    Intermediate results use a wide context so rounding happens once,
    downwards.

    Raises:
        LedgerArithmeticError: On division by zero or overflow
    """
    if Decimal(denominator) == 0:
        raise LedgerArithmeticError("Division by zero in ledger arithmetic")
    product = _WIDE_CONTEXT.multiply(value, Decimal(numerator))
    return to_money(_WIDE_CONTEXT.divide(product, Decimal(denominator)))


def percent_of(value: Decimal, percent: Decimal | int) -> Decimal:
    """Return ``value * percent / 100`` rounded down."""
    return mul_div(value, percent, 100)


def validate_amount(amount: Decimal, decimals: int) -> Decimal:
    """
    Validate an incoming asset amount.

    Args:
        amount: Amount in asset units
        decimals: Decimal precision of the asset

    Returns:
        The amount as Decimal

    Raises:
        ValidationError: If the amount is not a positive finite number
            or has more fractional digits than the asset supports
    """
    if not isinstance(amount, Decimal):
        try:
            amount = Decimal(str(amount))
        except InvalidOperation as e:
            raise ValidationError(f"Amount is not a number: {amount!r}") from e

    if not amount.is_finite() or amount <= 0:
        raise ValidationError(
            f"Amount must be a positive number, got {amount}",
            amount=str(amount),
        )

    exponent = amount.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > decimals:
        raise ValidationError(
            f"Amount {amount} exceeds asset precision of {decimals} decimals",
            amount=str(amount),
            decimals=decimals,
        )

    if amount >= MONEY_LIMIT:
        raise LedgerArithmeticError(
            f"Amount overflows ledger precision: {amount}"
        )
    return amount
