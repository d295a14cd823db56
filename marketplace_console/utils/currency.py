"""
Currency Formatter.

Renders fee amounts for display.  Fee-based engagement models (Market
Place, Aggregator, Market Place & Aggregator) quote their platform fee as a
share of the solution value, so they render as ``"15% of Solution Fee"``;
every other model renders as localized currency through Babel.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from babel.numbers import (
    NumberFormatError,
    format_currency,
    get_currency_symbol,
    is_currency,
    parse_decimal,
)

from marketplace_console.utils.math_utils import money_context, quantize_money, to_decimal

__all__ = [
    "DEFAULT_CURRENCY",
    "DEFAULT_LOCALE",
    "UNAVAILABLE_AMOUNT",
    "format_amount",
    "format_percentage",
    "format_plain_number",
    "parse_amount",
    "resolve_currency_code",
]

DEFAULT_CURRENCY: str = "USD"
DEFAULT_LOCALE: str = "en_US"
# Shown in place of NaN, infinite or non-numeric amounts.
UNAVAILABLE_AMOUNT: str = "N/A"

Amount = Union[Decimal, int, float, str]


def resolve_currency_code(currency_code: Optional[str]) -> str:
    """Return an upper-cased ISO 4217 code, falling back to USD."""
    if not currency_code:
        return DEFAULT_CURRENCY
    code = currency_code.strip().upper()
    if not is_currency(code):
        return DEFAULT_CURRENCY
    return code


def format_plain_number(amount: Amount) -> str:
    """Render a number without trailing zeros (``15.50`` -> ``"15.5"``)."""
    value = to_decimal(amount, "amount")
    with money_context(value):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal("1")))
        return format(value.normalize(), "f")


def format_percentage(amount: Amount) -> str:
    """Render a percentage label such as ``"12.5%"``."""
    return f"{format_plain_number(amount)}%"


def format_amount(
    amount: Amount,
    currency_code: Optional[str] = DEFAULT_CURRENCY,
    is_percentage_model: bool = False,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Render *amount* for a pricing card.

    Args:
        amount: The numeric amount.
        currency_code: ISO 4217 code; missing or unknown codes use USD.
        is_percentage_model: When true the amount is a percentage of the
            solution fee and is rendered verbatim.
        locale: Babel locale used for grouping and symbol placement.

    Returns:
        ``"{amount}% of Solution Fee"`` for percentage models, otherwise
        the localized currency string (``"$1,234.50"``).
        Amounts that are not finite numbers render as
        ``UNAVAILABLE_AMOUNT``.
    """
    try:
        value = to_decimal(amount, "amount")
    except ValueError:
        return UNAVAILABLE_AMOUNT
    if is_percentage_model:
        return f"{format_percentage(value)} of Solution Fee"
    with money_context(value):
        return format_currency(
            quantize_money(value),
            resolve_currency_code(currency_code),
            locale=locale,
        )


def parse_amount(
    text: str,
    currency_code: Optional[str] = DEFAULT_CURRENCY,
    locale: str = DEFAULT_LOCALE,
) -> Decimal:
    """Parse a string produced by :func:`format_amount` back to a Decimal.

    The currency symbol and ISO code are stripped before Babel parses the
    remaining localized number.  The result is rounded to two places.

    Raises:
        ValueError: If the remaining text is not a number in *locale*.
    """
    code = resolve_currency_code(currency_code)
    cleaned = text.replace(get_currency_symbol(code, locale=locale), "")
    cleaned = cleaned.replace(code, "").replace("\xa0", "").strip()

    negative = cleaned.startswith(("-", "−"))
    if negative:
        cleaned = cleaned[1:].strip()

    try:
        value = parse_decimal(cleaned, locale=locale)
    except NumberFormatError as exc:
        raise ValueError(f"Cannot parse {text!r} as a {code} amount.") from exc

    return quantize_money(-value if negative else value)
