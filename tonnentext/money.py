"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout. Remote amounts
arrive as strings ("25.8") and are converted here, never via float.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

DEFAULT_CURRENCY = "EUR"

CURRENCY_SYMBOLS = {
    "EUR": "€",
}

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Use string representation to preserve precision
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def format_money(value: Number, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format monetary value the German way ("25,80 €").

    Args:
        value: Value to format
        currency: Currency code

    Returns:
        Formatted string with currency symbol
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    formatted = f"{round_money(value):,.2f}"
    # swap separators: 1,234.50 -> 1.234,50
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{formatted} {symbol}"


def add(a: Number, b: Number) -> Decimal:
    """Safe addition of monetary values."""
    return to_decimal(a) + to_decimal(b)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def total(values) -> Decimal:
    """Sum an iterable of monetary values, rounded to cents."""
    result = Decimal("0")
    for value in values:
        result = add(result, value)
    return round_money(result)
