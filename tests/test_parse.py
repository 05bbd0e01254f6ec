import pytest

from billsplit.utils.parse import (
    format_cents,
    format_currency,
    format_currency_with_symbol,
    parse_currency,
    parse_quantity,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("12,50", 12.5),
        ("12.5", 12.5),
        (" 3 ", 3.0),
        ("abc", 0.0),
        ("", 0.0),
        ("nan", 0.0),
        ("12abc", 12.0),
        ("1,234,56", 1.234),
        ("-3,5", -3.5),
    ],
)
def test_parse_currency(text, expected):
    assert parse_currency(text) == expected


def test_parse_quantity():
    assert parse_quantity("2,5") == 2.5
    assert parse_quantity("two") is None
    assert parse_quantity("inf") is None
    assert parse_quantity("2,5 beers") == 2.5
    assert parse_quantity("1e999") is None


def test_format_currency():
    assert format_currency(12.5) == "12,50"
    assert format_currency(1234) == "1234,00"
    assert format_currency(27.5, places=0, separator=".") == "28"


def test_format_currency_with_symbol():
    assert format_currency_with_symbol(27.5) == "R$ 27,50"
    assert format_currency_with_symbol(3, symbol="€") == "€ 3,00"


def test_format_cents():
    assert format_cents(1001) == "10,01"
