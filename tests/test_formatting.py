from decimal import Decimal

import pytest

from vat_service.utils.formatting import format_currency, format_percentage


@pytest.mark.parametrize(
    "cents,currency,locale,expected",
    [
        (2500, "EUR", "fr_FR", "25,00\xa0€"),
        (2450050, "EUR", "fr_FR", "24\u202f500,50\xa0€"),
        (2450050, "EUR", "de_DE", "24.500,50\xa0€"),
        (2450050, "EUR", "en_GB", "€24,500.50"),
        (2450050, "EUR", "nl-NL", "€\xa024.500,50"),
        (199, "USD", "en_US", "$1.99"),
        (0, "EUR", "fr_FR", "0,00\xa0€"),
        (5, "EUR", "fr_FR", "0,05\xa0€"),
        (-1250, "EUR", "fr_FR", "-12,50\xa0€"),
        (1500, "JPY", "en_US", "JPY1,500"),
        (1000, "SEK", "de_DE", "10,00\xa0SEK"),
    ],
)
def test_format_currency(cents, currency, locale, expected):
    assert format_currency(cents, currency, locale) == expected


def test_format_currency_defaults_to_settings():
    assert format_currency(3600) == "36,00\xa0€"


def test_unknown_locale_falls_back_to_french_style():
    assert format_currency(100000, "EUR", "xx_XX") == "1\u202f000,00\xa0€"


@pytest.mark.parametrize(
    "rate,expected",
    [
        (Decimal("0.20"), "20%"),
        (Decimal("0.19"), "19%"),
        (Decimal("0"), "0%"),
        (Decimal("0.081"), "8%"),
        (Decimal("0.055"), "6%"),
        (0.27, "27%"),
        ("0.175", "18%"),
    ],
)
def test_format_percentage(rate, expected):
    assert format_percentage(rate) == expected
