"""
Balance ledger.

Every change to an employee balance goes through this module: the stored
balance is updated and exactly one LedgerEntry is appended, in the caller's
transaction. The employee row is locked (SELECT ... FOR UPDATE) before the
current balance is read, and the optimistic ``version`` column turns any
lost update into a StaleDataError at flush time.

Nothing here commits: callers wrap the work in ``db.run_in_transaction`` so
the balance write, the ledger append and any request status change land
together or not at all.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from . import crud
from .calculations import majorated_credit, quantize, to_decimal
from .errors import AuthorizationError, NotFoundError, ValidationError
from .models import BalanceKind, Employee, EntrySource, LeaveRequest, LedgerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentResult:
    new_balance: Decimal
    applied_delta: Decimal
    rate_label: str | None
    entry: LedgerEntry


def _append_entry(
    db: Session,
    employee: Employee,
    *,
    actor_id: int,
    kind: BalanceKind,
    source: EntrySource,
    delta: Decimal,
    reason: str | None = None,
    activity_at: datetime | None = None,
    raw_hours: Decimal | None = None,
    rate_label: str | None = None,
    request_id: int | None = None,
) -> LedgerEntry:
    new_balance = quantize(employee.balance(kind) + delta)
    employee.set_balance(kind, new_balance)

    entry = LedgerEntry(
        target_id=employee.id,
        actor_id=actor_id,
        balance_kind=kind,
        source=source,
        request_id=request_id,
        delta=delta,
        balance_after=new_balance,
        reason=reason,
        activity_at=activity_at,
        raw_hours=raw_hours,
        rate_label=rate_label,
    )
    db.add(entry)
    db.flush()

    logger.info(
        "Ledger %s %s employee=%s actor=%s delta=%s balance=%s",
        source.value,
        kind.value,
        employee.id,
        actor_id,
        delta,
        new_balance,
    )
    return entry


def apply_adjustment(
    db: Session,
    target_id: int,
    actor_id: int,
    kind: BalanceKind,
    variation: Decimal | float | int | str,
    reason: str | None = None,
    activity_at: datetime | None = None,
) -> AdjustmentResult:
    """
    Manual balance adjustment.

    - leave_days: the variation is applied as given.
    - overtime_hours, positive: the variation is the raw worked duration and
      is majorated according to the week's already credited hours.
      reason and activity_at are mandatory.
    - overtime_hours, negative: subtracted as is, never majorated.

    The actor must be the target employee or an admin/HR employee.
    No floor is enforced on the resulting balance.
    """
    kind = BalanceKind(kind)
    variation = quantize(to_decimal(variation))
    reason = reason.strip() if reason and reason.strip() else None

    if variation == 0:
        raise ValidationError("Variation must be non-zero")

    is_overtime_credit = kind == BalanceKind.OVERTIME_HOURS and variation > 0
    if is_overtime_credit:
        if reason is None:
            raise ValidationError("A reason is mandatory when crediting overtime")
        if activity_at is None:
            raise ValidationError(
                "The activity date and time are mandatory to compute the majoration"
            )

    actor = crud.get_employee(db, actor_id)
    if actor is None:
        raise NotFoundError(f"Actor {actor_id} not found")
    if actor.id != target_id and not actor.is_manager:
        raise AuthorizationError(
            "Only the employee or an admin/HR member may adjust this balance"
        )

    employee = crud.lock_employee(db, target_id)
    if employee is None:
        raise NotFoundError(f"Employee {target_id} not found")

    if not is_overtime_credit:
        entry = _append_entry(
            db,
            employee,
            actor_id=actor.id,
            kind=kind,
            source=EntrySource.MANUAL,
            delta=variation,
            reason=reason,
        )
        return AdjustmentResult(
            new_balance=entry.balance_after,
            applied_delta=entry.delta,
            rate_label=None,
            entry=entry,
        )

    # Read under the row lock so two credits in the same week cannot both
    # see the same weekly total.
    existing = crud.weekly_overtime_hours(db, employee.id, activity_at)
    credit = majorated_credit(activity_at, variation, existing)
    entry = _append_entry(
        db,
        employee,
        actor_id=actor.id,
        kind=kind,
        source=EntrySource.MANUAL,
        delta=credit.credit,
        reason=reason,
        activity_at=activity_at,
        raw_hours=variation,
        rate_label=credit.rate_label,
    )
    return AdjustmentResult(
        new_balance=entry.balance_after,
        applied_delta=entry.delta,
        rate_label=credit.rate_label,
        entry=entry,
    )


def debit_for_request(
    db: Session,
    employee: Employee,
    request: LeaveRequest,
    *,
    actor_id: int,
    kind: BalanceKind,
    amount: Decimal,
) -> LedgerEntry:
    """Debit triggered by an accepted request. employee must already be locked."""
    if amount <= 0:
        raise ValueError(f"amount must be > 0 (got {amount})")
    return _append_entry(
        db,
        employee,
        actor_id=actor_id,
        kind=kind,
        source=EntrySource.REQUEST,
        delta=-quantize(amount),
        request_id=request.id,
    )


def open_balances(
    db: Session,
    employee: Employee,
    *,
    actor_id: int | None = None,
    leave_days: Decimal | float | int = 0,
    overtime_hours: Decimal | float | int = 0,
) -> list[LedgerEntry]:
    """Record initial balances of a new employee as ledger entries."""
    entries = []
    for kind, amount in (
        (BalanceKind.LEAVE_DAYS, leave_days),
        (BalanceKind.OVERTIME_HOURS, overtime_hours),
    ):
        amount = quantize(to_decimal(amount))
        if amount == 0:
            continue
        entries.append(
            _append_entry(
                db,
                employee,
                actor_id=actor_id if actor_id is not None else employee.id,
                kind=kind,
                source=EntrySource.OPENING,
                delta=amount,
                reason="Opening balance",
            )
        )
    return entries


def check_consistency(db: Session, employee: Employee) -> dict[BalanceKind, tuple[Decimal, Decimal]]:
    """
    Compare stored balances with the sum of ledger deltas.
    Returns {kind: (stored, from_ledger)} for every kind that drifted.
    """
    totals = crud.ledger_totals(db, employee.id)
    drift = {}
    for kind, from_ledger in totals.items():
        stored = quantize(employee.balance(kind))
        if stored != from_ledger:
            drift[kind] = (stored, from_ledger)
    return drift
