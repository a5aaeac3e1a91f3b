from datetime import date, datetime, timedelta

import pytest

from mesconges.calendar_fr import (
    easter_sunday,
    first_non_working_day,
    holiday_name,
    is_non_working_day,
    non_working_days,
    public_holidays,
)


@pytest.mark.parametrize(
    "year, expected",
    [
        (2000, date(2000, 4, 23)),
        (2019, date(2019, 4, 21)),
        (2024, date(2024, 3, 31)),
        (2025, date(2025, 4, 20)),
        (2038, date(2038, 4, 25)),
        (1818, date(1818, 3, 22)),
    ],
)
def test_easter_sunday(year, expected):
    assert easter_sunday(year) == expected


@pytest.mark.parametrize("year", [1999, 2000, 2024, 2100])
def test_every_weekend_day_is_non_working(year):
    day = date(year, 1, 1)
    while day.year == year:
        if day.weekday() >= 5:
            assert is_non_working_day(day), day
        day += timedelta(days=1)


def test_fixed_and_movable_holidays_2024():
    assert is_non_working_day(date(2024, 5, 1))
    assert is_non_working_day(date(2024, 4, 1))  # Easter Monday
    assert is_non_working_day(date(2024, 5, 9))  # Ascension
    assert is_non_working_day(date(2024, 5, 20))  # Whit Monday
    assert not is_non_working_day(date(2024, 5, 2))


def test_time_of_day_is_ignored():
    assert is_non_working_day(datetime(2024, 12, 25, 23, 59))
    assert not is_non_working_day(datetime(2024, 12, 24, 0, 0))


def test_leap_year_has_eleven_holidays():
    holidays = public_holidays(2024)
    assert len(holidays) == 11
    assert date(2024, 2, 29) not in holidays
    assert holiday_name(date(2024, 7, 14)) == "Fête nationale"
    assert holiday_name(date(2024, 7, 15)) is None


def test_first_non_working_day_in_range():
    # Thursday 2024-05-02 to Monday 2024-05-06: Saturday is the first blocked day
    assert first_non_working_day(date(2024, 5, 2), date(2024, 5, 6)) == date(2024, 5, 4)
    assert first_non_working_day(date(2024, 6, 3), date(2024, 6, 7)) is None


def test_non_working_days_lists_weekends_and_holidays():
    days = non_working_days(date(2024, 5, 6), date(2024, 5, 12))
    assert days == [date(2024, 5, 8), date(2024, 5, 9), date(2024, 5, 11), date(2024, 5, 12)]
