"""Fixed-point money helpers.

All balances and amounts are ``Decimal`` with exactly two fractional digits.
No float ever touches a balance; parsing and formatting happen at the API
boundary only.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.bank_common.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value: Decimal) -> Decimal:
    """Round to cents (ROUND_HALF_UP)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Parse a user supplied amount: '12.5', 12.5, 12 -> Decimal('12.50').

    Rejects non-numbers, NaN/Infinity and more than two fractional digits.
    """
    if isinstance(raw, bool):
        raise ValidationError(field, f"{field} must be a number")
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(field, f"{field} must be a number") from None
    if not value.is_finite():
        raise ValidationError(field, f"{field} must be a number")
    try:
        rounded = quantize(value)
    except InvalidOperation:
        raise ValidationError(field, f"{field} is out of range") from None
    if value != rounded:
        raise ValidationError(field, f"{field} must have at most two decimal places")
    return rounded


def require_within(amount: Decimal, low: Decimal, high: Decimal, field: str = "amount") -> None:
    """Raise ValidationError unless low <= amount <= high."""
    if amount < low:
        raise ValidationError(field, f"Minimum {field} is {format_amount(low)}")
    if amount > high:
        raise ValidationError(field, f"Maximum {field} is {format_amount(high)}")


def format_amount(amount: Decimal) -> str:
    """Serialize as a fixed two-digit string: Decimal('300') -> '300.00'."""
    return f"{quantize(amount):.2f}"


def amount_to_display(amount: Decimal) -> str:
    """Human display: 1500 -> '$1,500.00', -25 -> '-$25.00'."""
    q = quantize(amount)
    if q < 0:
        return f"-${-q:,.2f}"
    return f"${q:,.2f}"
