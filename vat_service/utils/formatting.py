from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from vat_service.core.config import settings

# (group separator, decimal separator, symbol first, space between)
_LOCALE_STYLES = {
    "fr": ("\u202f", ",", False, True),
    "de": (".", ",", False, True),
    "nl": (".", ",", True, True),
    "it": (".", ",", False, True),
    "es": (".", ",", False, True),
    "en": (",", ".", True, False),
}

_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£", "CHF": "CHF"}

# Currencies without a minor unit.
_ZERO_DECIMAL = {"JPY", "KRW"}


def _group(whole: str, separator: str) -> str:
    parts = []
    while whole:
        parts.append(whole[-3:])
        whole = whole[:-3]
    return separator.join(reversed(parts)) or "0"


def format_currency(
    minor_units: int,
    currency: Optional[str] = None,
    locale: Optional[str] = None,
) -> str:
    """
    2450050 cents, EUR, fr_FR -> "24\u202f500,50\xa0€"
    2450050 cents, EUR, en_GB -> "€24,500.50"
    """
    currency = (currency or settings.VAT_DEFAULT_CURRENCY).upper()
    language = (locale or settings.VAT_DISPLAY_LOCALE).replace("-", "_").split("_")[0]
    group_sep, decimal_sep, symbol_first, spaced = _LOCALE_STYLES.get(
        language.lower(), _LOCALE_STYLES["fr"]
    )
    symbol = _SYMBOLS.get(currency, currency)

    if currency in _ZERO_DECIMAL:
        amount = Decimal(minor_units)
        digits = f"{abs(amount):.0f}"
        whole, frac = digits, ""
    else:
        amount = Decimal(minor_units) / Decimal(100)
        whole, frac = f"{abs(amount):.2f}".split(".")

    number = _group(whole, group_sep)
    if frac:
        number = f"{number}{decimal_sep}{frac}"
    sign = "-" if minor_units < 0 else ""
    gap = "\xa0" if spaced else ""
    if symbol_first:
        return f"{sign}{symbol}{gap}{number}"
    return f"{sign}{number}{gap}{symbol}"


def format_percentage(rate: Union[Decimal, float, str]) -> str:
    percent = (Decimal(str(rate)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"
