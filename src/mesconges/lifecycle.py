from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy.orm import Session

from . import crud, ledger
from .calculations import chargeable_days, hours_between
from .calendar_fr import first_non_working_day
from .config import settings
from .errors import AuthorizationError, NotFoundError, ValidationError
from .formatting import format_days, format_hours
from .models import (
    BalanceKind,
    LeaveRequest,
    LedgerEntry,
    RequestKind,
    RequestStatus,
)

logger = logging.getLogger(__name__)

DAY_COUNTED_KINDS = frozenset({RequestKind.PAID_LEAVE, RequestKind.SPECIFIC_LEAVE})


class Presence(str, Enum):
    AT_WORK = "at_work"
    ON_LEAVE = "on_leave"
    SICK = "sick"


@dataclass(frozen=True)
class DecisionResult:
    request: LeaveRequest
    entry: LedgerEntry | None
    changed: bool


def request_cost(
    kind: RequestKind, start: datetime, end: datetime
) -> tuple[BalanceKind, Decimal] | None:
    """Balance debited when a request of this kind is accepted, if any."""
    if kind == RequestKind.PAID_LEAVE:
        return BalanceKind.LEAVE_DAYS, chargeable_days(start, end)
    if kind == RequestKind.OVERTIME_RECOVERY:
        return BalanceKind.OVERTIME_HOURS, hours_between(start, end)
    return None


def _insufficient(kind: BalanceKind, available: Decimal, requested: Decimal) -> ValidationError:
    if kind == BalanceKind.LEAVE_DAYS:
        message = (
            f"Insufficient leave balance ({format_days(available)} days available, "
            f"{format_days(requested)} requested)"
        )
    else:
        message = (
            f"Insufficient overtime balance ({format_hours(available)} available, "
            f"{format_hours(requested)} requested)"
        )
    return ValidationError(
        message,
        details={"available": str(available), "requested": str(requested)},
    )


def create_request(
    db: Session,
    employee_id: int,
    kind: RequestKind,
    start: datetime,
    end: datetime,
    reason: str | None = None,
    nature: str | None = None,
    attachment_ref: str | None = None,
) -> LeaveRequest:
    """
    Validate and store a new request.

    Sick leave is accepted immediately and never touches balances. The
    affordability checks below are advisory: acceptance checks again under
    the employee row lock.
    """
    kind = RequestKind(kind)
    if end < start:
        raise ValidationError(
            "End date must be after start date",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )

    employee = crud.get_employee(db, employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")

    nature = nature.strip() if nature and nature.strip() else None
    if kind == RequestKind.SPECIFIC_LEAVE and nature is None:
        raise ValidationError("A nature is mandatory for specific leave")
    if kind == RequestKind.SICK_LEAVE and not attachment_ref:
        raise ValidationError("A supporting document is mandatory for sick leave")

    if kind in DAY_COUNTED_KINDS:
        days = chargeable_days(start, end)
        if days == 0:
            blocked = first_non_working_day(start, end)
            raise ValidationError(
                "The selected period contains no working day",
                details={"first_non_working_day": blocked.isoformat() if blocked else None},
            )
        if kind == RequestKind.PAID_LEAVE and employee.leave_days_balance < days:
            raise _insufficient(BalanceKind.LEAVE_DAYS, employee.leave_days_balance, days)

    elif kind == RequestKind.OVERTIME_RECOVERY:
        hours = hours_between(start, end)
        if hours == 0:
            raise ValidationError("Recovery period must last more than zero hours")
        if employee.overtime_balance < hours:
            raise _insufficient(BalanceKind.OVERTIME_HOURS, employee.overtime_balance, hours)

    is_sick = kind == RequestKind.SICK_LEAVE
    request = LeaveRequest(
        employee_id=employee.id,
        kind=kind,
        status=RequestStatus.ACCEPTED if is_sick else RequestStatus.PENDING,
        start_at=start,
        end_at=end,
        reason=reason,
        nature=nature,
        attachment_ref=attachment_ref,
        decided_at=datetime.now() if is_sick else None,
    )
    db.add(request)
    db.flush()

    logger.info(
        "Request %s created: employee=%s kind=%s status=%s",
        request.id,
        employee.id,
        kind.value,
        request.status.value,
    )
    return request


def decide(
    db: Session,
    request_id: int,
    decision: RequestStatus,
    actor_id: int,
    *,
    enforce_floor: bool | None = None,
) -> DecisionResult:
    """
    Accept or reject a pending request.

    The first acceptance of a paid-leave or overtime-recovery request debits
    the employee balance once, in the same transaction as the status change.
    Accepting an already accepted request is a no-op. Any other decision on
    a decided request is refused.
    """
    decision = RequestStatus(decision)
    if decision == RequestStatus.PENDING:
        raise ValidationError("Decision must be 'accepted' or 'rejected'")
    if enforce_floor is None:
        enforce_floor = settings.enforce_balance_floor_on_accept

    actor = crud.get_employee(db, actor_id)
    if actor is None:
        raise NotFoundError(f"Actor {actor_id} not found")
    if not actor.is_manager:
        raise AuthorizationError("Only admin/HR members may decide requests")

    request = crud.get_request(db, request_id, for_update=True)
    if request is None:
        raise NotFoundError(f"Request {request_id} not found")

    if request.status == RequestStatus.ACCEPTED and decision == RequestStatus.ACCEPTED:
        logger.info("Request %s already accepted, nothing to do", request.id)
        return DecisionResult(request=request, entry=None, changed=False)

    if request.status != RequestStatus.PENDING:
        raise ValidationError(
            f"Request {request.id} is already {request.status.value}",
            details={"status": request.status.value},
        )

    entry = None
    cost = request_cost(request.kind, request.start_at, request.end_at)
    if decision == RequestStatus.ACCEPTED and cost is not None:
        kind, amount = cost
        employee = crud.lock_employee(db, request.employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {request.employee_id} not found")
        if amount > 0:
            if enforce_floor and employee.balance(kind) < amount:
                raise _insufficient(kind, employee.balance(kind), amount)
            entry = ledger.debit_for_request(
                db,
                employee,
                request,
                actor_id=actor.id,
                kind=kind,
                amount=amount,
            )

    request.status = decision
    request.decided_by_id = actor.id
    request.decided_at = datetime.now()
    db.flush()

    logger.info(
        "Request %s %s by %s (debited=%s)",
        request.id,
        decision.value,
        actor.id,
        entry is not None,
    )
    return DecisionResult(request=request, entry=entry, changed=True)


def presence_status(requests: Iterable[LeaveRequest], at: datetime) -> Presence:
    """Where an employee is at a given moment, from their accepted requests."""
    presence = Presence.AT_WORK
    for request in requests:
        if request.status != RequestStatus.ACCEPTED:
            continue
        if not request.start_at <= at <= request.end_at:
            continue
        if request.kind == RequestKind.SICK_LEAVE:
            return Presence.SICK
        presence = Presence.ON_LEAVE
    return presence
