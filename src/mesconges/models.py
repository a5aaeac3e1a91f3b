from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime
from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    pass


# Balances and deltas: days or hours, 4 decimal places
Amount = Numeric(12, 4)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EmployeeRole(str, Enum):
    ADMIN = "admin"
    HR = "rh"
    EMPLOYEE = "employee"


class RequestKind(str, Enum):
    PAID_LEAVE = "paid_leave"
    SICK_LEAVE = "sick_leave"
    OVERTIME_RECOVERY = "overtime_recovery"
    SPECIFIC_LEAVE = "specific_leave"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class BalanceKind(str, Enum):
    LEAVE_DAYS = "leave_days"
    OVERTIME_HOURS = "overtime_hours"


class EntrySource(str, Enum):
    OPENING = "opening"
    MANUAL = "manual"
    REQUEST = "request"


MANAGER_ROLES = frozenset({EmployeeRole.ADMIN, EmployeeRole.HR})


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class Employee(Base):
    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[EmployeeRole] = mapped_column(
        SQLEnum(EmployeeRole), default=EmployeeRole.EMPLOYEE, nullable=False
    )

    # Materialized from ledger_entry, only written by mesconges.ledger
    leave_days_balance: Mapped[Decimal] = mapped_column(
        Amount, default=Decimal(0), nullable=False
    )
    overtime_balance: Mapped[Decimal] = mapped_column(
        Amount, default=Decimal(0), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    requests: Mapped[list["LeaveRequest"]] = relationship(
        back_populates="employee",
        foreign_keys="LeaveRequest.employee_id",
        cascade="all, delete-orphan",
    )

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES

    def balance(self, kind: BalanceKind) -> Decimal:
        if kind == BalanceKind.LEAVE_DAYS:
            return self.leave_days_balance
        return self.overtime_balance

    def set_balance(self, kind: BalanceKind, value: Decimal) -> None:
        if kind == BalanceKind.LEAVE_DAYS:
            self.leave_days_balance = value
        else:
            self.overtime_balance = value


class LeaveRequest(Base):
    __tablename__ = "leave_request"
    __table_args__ = (
        Index("ix_leave_request_employee_status", "employee_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employee.id"), nullable=False
    )

    kind: Mapped[RequestKind] = mapped_column(SQLEnum(RequestKind), nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    reason: Mapped[str | None] = mapped_column(String(500))
    nature: Mapped[str | None] = mapped_column(String(100))
    attachment_ref: Mapped[str | None] = mapped_column(String(255))

    decided_by_id: Mapped[int | None] = mapped_column(ForeignKey("employee.id"))
    decided_at: Mapped[datetime | None] = mapped_column(DateTime)

    employee: Mapped["Employee"] = relationship(
        back_populates="requests",
        foreign_keys=[employee_id],
    )


class LedgerEntry(Base):
    """Append-only: rows are inserted by mesconges.ledger, never updated."""

    __tablename__ = "ledger_entry"
    __table_args__ = (
        Index("ix_ledger_entry_target_kind", "target_id", "balance_kind"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    target_id: Mapped[int] = mapped_column(ForeignKey("employee.id"), nullable=False)
    actor_id: Mapped[int] = mapped_column(ForeignKey("employee.id"), nullable=False)

    balance_kind: Mapped[BalanceKind] = mapped_column(
        SQLEnum(BalanceKind), nullable=False
    )
    source: Mapped[EntrySource] = mapped_column(SQLEnum(EntrySource), nullable=False)
    request_id: Mapped[int | None] = mapped_column(ForeignKey("leave_request.id"))

    delta: Mapped[Decimal] = mapped_column(Amount, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Amount, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, nullable=False
    )
    reason: Mapped[str | None] = mapped_column(String(500))

    # Overtime credits only
    activity_at: Mapped[datetime | None] = mapped_column(DateTime)
    raw_hours: Mapped[Decimal | None] = mapped_column(Amount)
    rate_label: Mapped[str | None] = mapped_column(String(50))
