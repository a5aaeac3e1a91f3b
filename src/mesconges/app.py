from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from . import crud, ledger, lifecycle
from .calendar_fr import non_working_days
from .config import settings
from .db import get_db, get_session_factory, run_in_transaction
from .errors import DomainError, NotFoundError, ValidationError
from .formatting import format_balance
from .models import RequestKind, RequestStatus
from .schemas import (
    AdjustmentIn,
    AdjustmentOut,
    BalanceOut,
    DecisionIn,
    DecisionOut,
    LedgerEntryOut,
    NonWorkingDaysOut,
    RequestCreateIn,
    RequestOut,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Widest range served by the calendar endpoint
MAX_CALENDAR_DAYS = 366 * 2

app = FastAPI(title=settings.app_name, debug=settings.debug)


@app.exception_handler(DomainError)
def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.error_code, "details": exc.details},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@app.post("/api/requests", status_code=201)
def create_request_api(
    payload: RequestCreateIn,
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    def work(db: Session):
        req = lifecycle.create_request(
            db,
            employee_id=payload.employee_id,
            kind=payload.kind,
            start=payload.start,
            end=payload.end,
            reason=payload.reason,
            nature=payload.nature,
            attachment_ref=payload.attachment_ref,
        )
        return {"id": req.id, "status": req.status.value}

    return run_in_transaction(factory, work)


@app.get("/api/requests", response_model=list[RequestOut])
def list_requests_api(
    employee_id: int | None = None,
    status: RequestStatus | None = None,
    kind: RequestKind | None = None,
    db: Session = Depends(get_db),
):
    return crud.list_requests(db, employee_id=employee_id, status=status, kind=kind)


@app.post("/api/requests/{request_id}/decision", response_model=DecisionOut)
def decide_request_api(
    request_id: int,
    payload: DecisionIn,
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    def work(db: Session) -> DecisionOut:
        result = lifecycle.decide(
            db,
            request_id=request_id,
            decision=payload.decision,
            actor_id=payload.actor_id,
        )
        return DecisionOut(
            id=result.request.id,
            status=result.request.status,
            debited=result.entry is not None,
            entry=LedgerEntryOut.model_validate(result.entry) if result.entry else None,
        )

    return run_in_transaction(factory, work)


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------

@app.post("/api/employees/{employee_id}/adjustments", response_model=AdjustmentOut)
def adjust_balance_api(
    employee_id: int,
    payload: AdjustmentIn,
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    def work(db: Session) -> AdjustmentOut:
        result = ledger.apply_adjustment(
            db,
            target_id=employee_id,
            actor_id=payload.actor_id,
            kind=payload.kind,
            variation=payload.variation,
            reason=payload.reason,
            activity_at=payload.activity_at,
        )
        return AdjustmentOut(
            new_balance=result.new_balance,
            applied_delta=result.applied_delta,
            rate_label=result.rate_label,
        )

    return run_in_transaction(factory, work)


@app.get("/api/employees/{employee_id}/balance", response_model=BalanceOut)
def balance_api(employee_id: int, db: Session = Depends(get_db)):
    employee = crud.get_employee(db, employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")

    requests = crud.list_requests(db, employee_id=employee_id, status=RequestStatus.ACCEPTED)
    presence = lifecycle.presence_status(requests, datetime.now())
    return BalanceOut(
        employee_id=employee.id,
        leave_days_balance=employee.leave_days_balance,
        overtime_balance=employee.overtime_balance,
        display=format_balance(employee.leave_days_balance, employee.overtime_balance),
        presence=presence.value,
    )


@app.get("/api/employees/{employee_id}/ledger", response_model=list[LedgerEntryOut])
def ledger_api(employee_id: int, db: Session = Depends(get_db)):
    if crud.get_employee(db, employee_id) is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return crud.list_ledger_entries(db, employee_id)


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

@app.get("/api/calendar/non-working-days", response_model=NonWorkingDaysOut)
def non_working_days_api(start: date, end: date):
    if end < start:
        raise ValidationError("end must be >= start")
    if (end - start).days > MAX_CALENDAR_DAYS:
        raise ValidationError(f"Range is limited to {MAX_CALENDAR_DAYS} days")
    return NonWorkingDaysOut(start=start, end=end, days=non_working_days(start, end))
