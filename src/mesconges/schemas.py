from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import BalanceKind, EntrySource, RequestKind, RequestStatus


def _drop_tz(value: datetime | None) -> datetime | None:
    # Timestamps are wall-clock times at the workplace, never converted
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


class RequestCreateIn(BaseModel):
    employee_id: int = Field(gt=0)
    kind: RequestKind
    start: datetime
    end: datetime
    reason: str | None = Field(default=None, max_length=500)
    nature: str | None = Field(default=None, max_length=100)
    attachment_ref: str | None = Field(default=None, max_length=255)

    @field_validator("start", "end")
    @classmethod
    def wall_clock(cls, value: datetime) -> datetime:
        return _drop_tz(value)


class DecisionIn(BaseModel):
    actor_id: int = Field(gt=0)
    decision: RequestStatus


class AdjustmentIn(BaseModel):
    actor_id: int = Field(gt=0)
    kind: BalanceKind
    variation: Decimal
    reason: str | None = Field(default=None, max_length=500)
    activity_at: datetime | None = None

    @field_validator("activity_at")
    @classmethod
    def wall_clock(cls, value: datetime | None) -> datetime | None:
        return _drop_tz(value)


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    kind: RequestKind
    status: RequestStatus
    created_at: datetime
    start_at: datetime
    end_at: datetime
    reason: str | None = None
    nature: str | None = None
    attachment_ref: str | None = None
    decided_by_id: int | None = None
    decided_at: datetime | None = None


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    target_id: int
    actor_id: int
    balance_kind: BalanceKind
    source: EntrySource
    request_id: int | None = None
    delta: Decimal
    balance_after: Decimal
    created_at: datetime
    reason: str | None = None
    activity_at: datetime | None = None
    raw_hours: Decimal | None = None
    rate_label: str | None = None


class DecisionOut(BaseModel):
    id: int
    status: RequestStatus
    debited: bool
    entry: LedgerEntryOut | None = None


class AdjustmentOut(BaseModel):
    new_balance: Decimal
    applied_delta: Decimal
    rate_label: str | None = None


class BalanceOut(BaseModel):
    employee_id: int
    leave_days_balance: Decimal
    overtime_balance: Decimal
    display: str
    presence: str


class NonWorkingDaysOut(BaseModel):
    start: date
    end: date
    days: list[date]
