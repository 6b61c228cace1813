"""Currency display helpers for the presentation layer."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "INR": "₹",
    "CNY": "¥",
    "BRL": "R$",
    "MAD": "DH",
}

SUPPORTED_CURRENCIES = tuple(CURRENCY_SYMBOLS)

NOT_AVAILABLE = "N/A"

# Currencies written with the symbol after the amount
_SUFFIX_CURRENCIES = {"MAD"}


def currency_symbol(currency_code: str) -> str:
    """Return the display symbol of a currency, or the code itself if unknown."""
    return CURRENCY_SYMBOLS.get(currency_code.upper(), currency_code)


def format_currency(amount: Decimal, currency_code: str = "USD", locale: str = "en") -> str:
    """Format an amount with two decimals and its currency symbol.

    The symbol goes after the amount for the Moroccan dirham and for Arabic
    locales, before it everywhere else.

    >>> format_currency(Decimal("1234.5"))
    '$1234.50'
    >>> format_currency(Decimal("10"), "MAD")
    '10.00 DH'
    """
    symbol = currency_symbol(currency_code)
    text = f"{Decimal(amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):f}"
    if currency_code.upper() in _SUFFIX_CURRENCIES or locale.lower().startswith("ar"):
        return f"{text} {symbol}"
    return f"{symbol}{text}"


def format_optional_currency(
    amount: Optional[Decimal], currency_code: str = "USD", locale: str = "en"
) -> str:
    """Format an amount, rendering undefined values as N/A."""
    if amount is None:
        return NOT_AVAILABLE
    return format_currency(amount, currency_code, locale)


def format_percent(value: Optional[Decimal]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):f}%"


def format_number(value: Optional[Decimal], places: int = 2) -> str:
    if value is None:
        return NOT_AVAILABLE
    exponent = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP):f}"
