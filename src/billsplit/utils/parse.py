from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional

from billsplit.config import get_settings


_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_quantity(text: str) -> Optional[float]:
    """Parse the number user input starts with, such as ``"2,5"`` or ``"12abc"``.

    Only the first comma is read as the decimal separator; ``None`` when
    the text does not start with a number.
    """
    match = _NUMBER_PREFIX.match(text.replace(",", ".", 1))
    if match is None:
        return None
    value = float(match.group(1))
    return value if math.isfinite(value) else None


def parse_currency(text: str) -> float:
    """Parse a money amount, falling back to ``0.0`` on anything unparsable."""
    value = parse_quantity(text)
    return 0.0 if value is None else value


def format_currency(value: float, places: Optional[int] = None, separator: Optional[str] = None) -> str:
    settings = get_settings()
    places = settings.currency_places if places is None else places
    separator = settings.decimal_separator if separator is None else separator

    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_EVEN)
    return f"{rounded:f}".replace(".", separator)


def format_currency_with_symbol(value: float, symbol: Optional[str] = None) -> str:
    symbol = get_settings().currency_symbol if symbol is None else symbol
    return f"{symbol} {format_currency(value)}"


def format_cents(amount_cents: int) -> str:
    return format_currency(amount_cents / 100)
