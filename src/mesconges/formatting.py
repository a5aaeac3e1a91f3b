from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .calculations import to_decimal


def format_hours(value: Decimal | float | int | str) -> str:
    """1.5 -> '1h30', -2 -> '-2h', 0 -> '0h'."""
    val = to_decimal(value)
    if val == 0:
        return "0h"

    sign = "-" if val < 0 else ""
    magnitude = abs(val)
    hours = int(magnitude)
    minutes = int(((magnitude - hours) * 60).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if minutes == 60:
        hours, minutes = hours + 1, 0

    if minutes == 0:
        return f"{sign}{hours}h"
    return f"{sign}{hours}h{minutes:02d}"


def format_days(value: Decimal | float | int | str) -> str:
    """10.00 -> '10', 10.50 -> '10,5' (French decimal comma, 2 decimals max)."""
    val = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{val:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text.replace(".", ",")


def format_balance(days: Decimal | float | int, hours: Decimal | float | int) -> str:
    """Balance sentence shown on dashboards, e.g. '10 jours et 1h30'."""
    days = to_decimal(days)
    hours = to_decimal(hours)
    if days == 0 and hours == 0:
        return "0 solde"
    if days == 0:
        return format_hours(hours)
    if hours == 0:
        return f"{format_days(days)} jours"
    return f"{format_days(days)} jours et {format_hours(hours)}"
