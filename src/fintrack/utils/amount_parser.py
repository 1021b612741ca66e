"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re
from typing import Optional

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal rounded to cents.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "€ 12"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency symbols and thousands separators
    cleaned = re.sub(r"[$€£¥₹]", "", amount_str.strip())
    cleaned = cleaned.replace(",", "").strip()

    try:
        return to_money(cleaned)
    except ValueError:
        raise ValueError(f"Could not parse amount '{amount_str}'")


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a Decimal rounded to cents.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount


def positive_amount(value) -> Optional[Decimal]:
    """Return ``value`` as money when it is a positive number, else None."""
    if value is None:
        return None
    try:
        amount = to_money(value)
    except ValueError:
        return None
    return amount if amount > 0 else None
