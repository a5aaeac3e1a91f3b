from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from .calendar_fr import is_non_working_day

ZERO = Decimal(0)
HALF_DAY = Decimal("0.5")
FULL_DAY = Decimal(1)

# Balances are stored with 4 decimal places
HOURS_QUANTUM = Decimal("0.0001")

# A same-day absence up to this many hours is a half day
HALF_DAY_MAX_HOURS = Decimal(5)
# Hour-of-day splitting morning and afternoon half days
AFTERNOON_HOUR = 13

_MICROSECONDS_PER_HOUR = Decimal(3_600_000_000)


@dataclass(frozen=True)
class OvertimePolicy:
    weekly_threshold: Decimal = Decimal(8)
    base_rate: Decimal = Decimal("1.25")
    over_threshold_rate: Decimal = Decimal("1.5")
    premium_rate: Decimal = Decimal(2)
    night_start_hour: int = 21
    night_end_hour: int = 6


DEFAULT_OVERTIME_POLICY = OvertimePolicy()


@dataclass(frozen=True)
class OvertimeCredit:
    credit: Decimal
    rate_label: str
    hours_at_base_rate: Decimal = ZERO
    hours_over_threshold: Decimal = ZERO


def quantize(value: Decimal) -> Decimal:
    return value.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def hours_between(start: datetime, end: datetime) -> Decimal:
    if end < start:
        raise ValueError("end must be >= start")
    microseconds = (end - start) // timedelta(microseconds=1)
    return quantize(Decimal(microseconds) / _MICROSECONDS_PER_HOUR)


# ---------------------------------------------------------------------------
# Leave days
# ---------------------------------------------------------------------------

def chargeable_days(start: datetime, end: datetime) -> Decimal:
    """
    Number of leave days a period costs, with half-day granularity.

    Same day:
        0 on a weekend/holiday, 0.5 up to 5 hours, 1 otherwise.
    Several days:
        - first day: 0.5 when starting at 13h or later, else 1
        - last day: 0.5 when ending at 13h or earlier, else 1
        - days in between: 1 each
        Weekends and holidays always count 0.

    Hours are read on the naive local timestamps, no timezone conversion.
    A result of 0 means the period contains no working day.
    """
    if end < start:
        raise ValueError("end must be >= start")

    if start.date() == end.date():
        if is_non_working_day(start):
            return ZERO
        return HALF_DAY if hours_between(start, end) <= HALF_DAY_MAX_HOURS else FULL_DAY

    total = ZERO
    if not is_non_working_day(start):
        total += HALF_DAY if start.hour >= AFTERNOON_HOUR else FULL_DAY
    if not is_non_working_day(end):
        total += HALF_DAY if end.hour <= AFTERNOON_HOUR else FULL_DAY

    current = start.date() + timedelta(days=1)
    last = end.date()
    while current < last:
        if not is_non_working_day(current):
            total += FULL_DAY
        current += timedelta(days=1)
    return total


# ---------------------------------------------------------------------------
# Overtime majoration
# ---------------------------------------------------------------------------

def _percent(rate: Decimal) -> str:
    return f"{(rate - 1) * 100:.0f}%"


def _hours_label(hours: Decimal) -> str:
    if hours == hours.to_integral_value():
        return f"{hours:.0f}h"
    return f"{hours.normalize()}h"


def iso_week_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """[Monday 00:00, next Monday 00:00) of the ISO week containing moment."""
    monday = datetime.combine(moment.date() - timedelta(days=moment.weekday()), datetime.min.time())
    return monday, monday + timedelta(days=7)


def is_night(moment: datetime, policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY) -> bool:
    hour = moment.hour
    if policy.night_start_hour > policy.night_end_hour:
        return hour >= policy.night_start_hour or hour < policy.night_end_hour
    return policy.night_start_hour <= hour < policy.night_end_hour


def majorated_credit(
    activity_start: datetime,
    raw_hours: Decimal,
    existing_weekly_hours: Decimal,
    policy: OvertimePolicy = DEFAULT_OVERTIME_POLICY,
) -> OvertimeCredit:
    """
    Credit owed for raw_hours of overtime started at activity_start.

    First match wins:
    1. Sunday: premium rate on everything.
    2. Start hour in the night window: premium rate on everything.
    3. Weekly threshold, given the raw hours already logged this ISO week:
       - already at/over threshold: everything at the over-threshold rate
       - still under after this entry: everything at the base rate
       - straddling: base rate up to the threshold, over-threshold rate after

    Only called for credits. Debits are never majorated.
    """
    raw_hours = to_decimal(raw_hours)
    existing_weekly_hours = to_decimal(existing_weekly_hours)
    if raw_hours <= 0:
        raise ValueError(f"raw_hours must be > 0 (got {raw_hours})")

    premium = _percent(policy.premium_rate)
    if activity_start.weekday() == 6:
        return OvertimeCredit(
            credit=quantize(raw_hours * policy.premium_rate),
            rate_label=f"Sunday ({premium})",
        )

    if is_night(activity_start, policy):
        return OvertimeCredit(
            credit=quantize(raw_hours * policy.premium_rate),
            rate_label=f"Night ({premium})",
        )

    threshold = policy.weekly_threshold
    base = _percent(policy.base_rate)
    over = _percent(policy.over_threshold_rate)
    limit = _hours_label(threshold)

    if existing_weekly_hours >= threshold:
        return OvertimeCredit(
            credit=quantize(raw_hours * policy.over_threshold_rate),
            rate_label=f">{limit} ({over})",
            hours_over_threshold=raw_hours,
        )

    if existing_weekly_hours + raw_hours <= threshold:
        return OvertimeCredit(
            credit=quantize(raw_hours * policy.base_rate),
            rate_label=f"<{limit} ({base})",
            hours_at_base_rate=raw_hours,
        )

    at_base = threshold - existing_weekly_hours
    over_threshold = raw_hours - at_base
    return OvertimeCredit(
        credit=quantize(at_base * policy.base_rate + over_threshold * policy.over_threshold_rate),
        rate_label=f"Mixed ({base} / {over})",
        hours_at_base_rate=at_base,
        hours_over_threshold=over_threshold,
    )
