"""Formatting utilities for currency, counts and progress display."""

from typing import Union

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def format_currency(amount: Union[float, int], currency: str = "USD") -> str:
    """Format a money amount with its currency.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency(-20, "EUR")
        '-€20.00'
        >>> format_currency(12, "KZT")
        '12.00 KZT'
    """
    sign = "-" if amount < 0 else ""
    formatted = f"{abs(amount):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{sign}{symbol}{formatted}"
    return f"{sign}{formatted} {currency}"


def format_number(value: Union[float, int]) -> str:
    """Format a count with at most two decimals and no trailing zeros.

    Example:
        >>> format_number(1500)
        '1,500'
        >>> format_number(2.50)
        '2.5'
    """
    formatted = f"{value:,.2f}"
    return formatted.rstrip("0").rstrip(".")


def format_progress(progress: float) -> str:
    return f"{round(progress * 100)}% of goal"
