"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

# Longest symbols first so "C$" is not left behind as "C"
_CURRENCY_SYMBOLS = re.compile(r"C\$|A\$|R\$|DH|[$€£¥₹]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount typed on the command line.

    Handles "123.45", "$123.45", "1,234.56", "12.50 DH" and the accounting
    "(123.45)" notation for negative amounts.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = _CURRENCY_SYMBOLS.sub("", amount_str).replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_percent(percent_str: str) -> Decimal:
    """Parse a percentage such as "15" or "15%" into Decimal("15")."""
    return parse_amount(percent_str.strip().rstrip("%"))
