"""Formatting utilities for currency and delta display."""

from __future__ import annotations

from typing import Union


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-5)
        '-$5.00'
    """
    formatted = f"{abs(amount):,.2f}"
    prefix = "-" if amount < 0 else ""
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def format_delta(amount: Union[float, int]) -> str:
    """Signed amount against budget: ``"+$12.00"`` when over, ``"-$3.50"`` when under."""
    if amount < 0:
        return format_currency(amount)
    return f"+{format_currency(amount)}"


def format_percent(value: float, decimals: int = 0) -> str:
    return f"{value:.{decimals}f}%"


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown doesn't treat them as LaTeX."""
    return text.replace("$", "\\$")
