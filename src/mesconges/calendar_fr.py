"""
French metropolitan working-day calendar.

Single source for every "is this a working day" decision: leave-day
counting, request validation and the date picker endpoint all go through
here.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from functools import lru_cache

FIXED_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "Jour de l'an",
    (5, 1): "Fête du Travail",
    (5, 8): "Victoire 1945",
    (7, 14): "Fête nationale",
    (8, 15): "Assomption",
    (11, 1): "Toussaint",
    (11, 11): "Armistice 1918",
    (12, 25): "Noël",
}

# Offsets in days from Easter Sunday
EASTER_HOLIDAYS: dict[int, str] = {
    1: "Lundi de Pâques",
    39: "Ascension",
    50: "Lundi de Pentecôte",
}


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (Meeus/Jones/Butcher)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=64)
def _holidays_for_year(year: int) -> tuple[tuple[date, str], ...]:
    days = [(date(year, month, day), name) for (month, day), name in FIXED_HOLIDAYS.items()]
    easter = easter_sunday(year)
    days.extend((easter + timedelta(days=offset), name) for offset, name in EASTER_HOLIDAYS.items())
    return tuple(sorted(days))


def public_holidays(year: int) -> dict[date, str]:
    return dict(_holidays_for_year(year))


def holiday_name(day: date | datetime) -> str | None:
    d = _as_date(day)
    return public_holidays(d.year).get(d)


def is_weekend(day: date | datetime) -> bool:
    return _as_date(day).weekday() >= 5


def is_non_working_day(day: date | datetime) -> bool:
    """True for Saturdays, Sundays and French public holidays."""
    d = _as_date(day)
    if d.weekday() >= 5:
        return True
    return d in public_holidays(d.year)


def non_working_days(start: date | datetime, end: date | datetime) -> list[date]:
    """Weekends and holidays within [start, end], both inclusive."""
    first, last = _as_date(start), _as_date(end)
    if last < first:
        raise ValueError("end must be >= start")
    out: list[date] = []
    current = first
    while current <= last:
        if is_non_working_day(current):
            out.append(current)
        current += timedelta(days=1)
    return out


def first_non_working_day(start: date | datetime, end: date | datetime) -> date | None:
    first, last = _as_date(start), _as_date(end)
    current = first
    while current <= last:
        if is_non_working_day(current):
            return current
        current += timedelta(days=1)
    return None
