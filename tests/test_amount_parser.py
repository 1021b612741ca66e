"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from fintrack.utils.amount_parser import parse_amount, positive_amount, to_money


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("€ 12", Decimal("12.00")),
        ("-5.5", Decimal("-5.50")),
        ("10.005", Decimal("10.01")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "$", "12.3.4"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_to_money_accepts_numbers():
    assert to_money(30) == Decimal("30.00")
    assert to_money(0.1) == Decimal("0.10")
    assert to_money("12.5") == Decimal("12.50")


@pytest.mark.parametrize("value", ["NaN", "Infinity", None, "twelve"])
def test_to_money_rejects_non_numeric(value):
    with pytest.raises(ValueError, match="Not a monetary amount"):
        to_money(value)


def test_positive_amount():
    assert positive_amount("20") == Decimal("20.00")
    assert positive_amount(Decimal("0.004")) is None
    assert positive_amount(0) is None
    assert positive_amount(-3) is None
    assert positive_amount("nope") is None
    assert positive_amount(None) is None
