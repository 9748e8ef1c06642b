"""Money parsing and formatting utilities.

All amounts are ``Decimal``. Rounding to cents uses banker's rounding
(ROUND_HALF_EVEN) everywhere an amount is displayed or exported.
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "8.00"
    - "$8.00"
    - "$8.00 " (trailing space, as written in the cost column)
    - "-1.50"
    - "-$1.50"
    - "1,234.56"
    - "(1.50)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def round_cents(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places."""
    return amount.quantize(CENT, rounding=ROUND_HALF_EVEN)


def format_money(amount: Decimal) -> str:
    """Format an amount with exactly two decimals, e.g. ``8.00``."""
    return str(round_cents(amount))


def amounts_equal(left: Decimal, right: Decimal) -> bool:
    """Return True if two amounts differ by less than one cent."""
    return abs(left - right) < CENT
