from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .calculations import iso_week_bounds, quantize
from .models import (
    BalanceKind,
    Employee,
    EmployeeRole,
    EntrySource,
    LeaveRequest,
    LedgerEntry,
    RequestKind,
    RequestStatus,
)


def get_employee(db: Session, employee_id: int) -> Employee | None:
    return db.get(Employee, employee_id)


def lock_employee(db: Session, employee_id: int) -> Employee | None:
    """
    Load an employee with a row lock held until the transaction ends.
    Always re-reads the row so balances are never served from the identity map.
    """
    stmt = (
        select(Employee)
        .where(Employee.id == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def list_employees(db: Session) -> list[Employee]:
    return list(db.scalars(select(Employee).order_by(Employee.id.asc())).all())


def add_employee(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    role: EmployeeRole = EmployeeRole.EMPLOYEE,
) -> Employee:
    employee = Employee(
        first_name=first_name,
        last_name=last_name,
        email=email,
        role=role,
        leave_days_balance=Decimal(0),
        overtime_balance=Decimal(0),
    )
    db.add(employee)
    db.flush()
    return employee


def get_request(db: Session, request_id: int, *, for_update: bool = False) -> LeaveRequest | None:
    if not for_update:
        return db.get(LeaveRequest, request_id)
    stmt = (
        select(LeaveRequest)
        .where(LeaveRequest.id == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def list_requests(
    db: Session,
    *,
    employee_id: int | None = None,
    status: RequestStatus | None = None,
    kind: RequestKind | None = None,
) -> list[LeaveRequest]:
    stmt = select(LeaveRequest)
    if employee_id is not None:
        stmt = stmt.where(LeaveRequest.employee_id == employee_id)
    if status is not None:
        stmt = stmt.where(LeaveRequest.status == status)
    if kind is not None:
        stmt = stmt.where(LeaveRequest.kind == kind)
    stmt = stmt.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
    return list(db.scalars(stmt).all())


def list_ledger_entries(db: Session, employee_id: int) -> list[LedgerEntry]:
    stmt = (
        select(LedgerEntry)
        .where(LedgerEntry.target_id == employee_id)
        .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
    )
    return list(db.scalars(stmt).all())


def weekly_overtime_hours(db: Session, employee_id: int, activity_at: datetime) -> Decimal:
    """
    Raw overtime hours already credited to the employee for activities
    in the ISO week (Monday-start) containing activity_at.
    """
    week_start, week_end = iso_week_bounds(activity_at)
    stmt = (
        select(func.coalesce(func.sum(LedgerEntry.raw_hours), 0))
        .where(LedgerEntry.target_id == employee_id)
        .where(LedgerEntry.balance_kind == BalanceKind.OVERTIME_HOURS)
        .where(LedgerEntry.source == EntrySource.MANUAL)
        .where(LedgerEntry.raw_hours.is_not(None))
        .where(LedgerEntry.activity_at >= week_start)
        .where(LedgerEntry.activity_at < week_end)
    )
    total = db.scalar(stmt)
    return quantize(Decimal(str(total or 0)))


def ledger_totals(db: Session, employee_id: int) -> dict[BalanceKind, Decimal]:
    stmt = (
        select(LedgerEntry.balance_kind, func.coalesce(func.sum(LedgerEntry.delta), 0))
        .where(LedgerEntry.target_id == employee_id)
        .group_by(LedgerEntry.balance_kind)
    )
    totals = {kind: Decimal(0) for kind in BalanceKind}
    for kind, total in db.execute(stmt):
        totals[kind] = quantize(Decimal(str(total)))
    return totals
