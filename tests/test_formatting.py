from decimal import Decimal

import pytest

from mesconges.formatting import format_balance, format_days, format_hours


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0h"),
        (1.5, "1h30"),
        (Decimal("2.25"), "2h15"),
        (-2, "-2h"),
        (Decimal("-0.75"), "-0h45"),
        (Decimal("1.9999"), "2h"),
        ("3", "3h"),
    ],
)
def test_format_hours(value, expected):
    assert format_hours(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("10.00"), "10"),
        (Decimal("10.50"), "10,5"),
        (Decimal("-1.5"), "-1,5"),
        (Decimal("2.3333"), "2,33"),
        (0, "0"),
    ],
)
def test_format_days(value, expected):
    assert format_days(value) == expected


def test_format_balance_variants():
    assert format_balance(0, 0) == "0 solde"
    assert format_balance(0, Decimal("1.5")) == "1h30"
    assert format_balance(Decimal("12.5"), 0) == "12,5 jours"
    assert format_balance(10, Decimal("1.5")) == "10 jours et 1h30"
