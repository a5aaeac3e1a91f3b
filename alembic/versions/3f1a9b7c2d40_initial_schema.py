"""Initial schema: employee, leave_request, ledger_entry

Revision ID: 3f1a9b7c2d40
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1a9b7c2d40"
down_revision = None
branch_labels = None
depends_on = None

employee_role = sa.Enum("ADMIN", "HR", "EMPLOYEE", name="employeerole")
request_kind = sa.Enum(
    "PAID_LEAVE",
    "SICK_LEAVE",
    "OVERTIME_RECOVERY",
    "SPECIFIC_LEAVE",
    name="requestkind",
)
request_status = sa.Enum("PENDING", "ACCEPTED", "REJECTED", name="requeststatus")
balance_kind = sa.Enum("LEAVE_DAYS", "OVERTIME_HOURS", name="balancekind")
entry_source = sa.Enum("OPENING", "MANUAL", "REQUEST", name="entrysource")


def upgrade() -> None:
    op.create_table(
        "employee",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", employee_role, nullable=False),
        sa.Column("leave_days_balance", sa.Numeric(12, 4), nullable=False),
        sa.Column("overtime_balance", sa.Numeric(12, 4), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_employee_email"),
    )

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("kind", request_kind, nullable=False),
        sa.Column("status", request_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("nature", sa.String(length=100), nullable=True),
        sa.Column("attachment_ref", sa.String(length=255), nullable=True),
        sa.Column("decided_by_id", sa.Integer(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employee.id"]),
        sa.ForeignKeyConstraint(["decided_by_id"], ["employee.id"]),
    )
    op.create_index(
        "ix_leave_request_employee_status",
        "leave_request",
        ["employee_id", "status"],
    )

    op.create_table(
        "ledger_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("balance_kind", balance_kind, nullable=False),
        sa.Column("source", entry_source, nullable=False),
        sa.Column("request_id", sa.Integer(), nullable=True),
        sa.Column("delta", sa.Numeric(12, 4), nullable=False),
        sa.Column("balance_after", sa.Numeric(12, 4), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("activity_at", sa.DateTime(), nullable=True),
        sa.Column("raw_hours", sa.Numeric(12, 4), nullable=True),
        sa.Column("rate_label", sa.String(length=50), nullable=True),
        sa.ForeignKeyConstraint(["target_id"], ["employee.id"]),
        sa.ForeignKeyConstraint(["actor_id"], ["employee.id"]),
        sa.ForeignKeyConstraint(["request_id"], ["leave_request.id"]),
    )
    op.create_index(
        "ix_ledger_entry_target_kind",
        "ledger_entry",
        ["target_id", "balance_kind"],
    )


def downgrade() -> None:
    op.drop_index("ix_ledger_entry_target_kind", table_name="ledger_entry")
    op.drop_table("ledger_entry")
    op.drop_index("ix_leave_request_employee_status", table_name="leave_request")
    op.drop_table("leave_request")
    op.drop_table("employee")

    bind = op.get_bind()
    for enum in (entry_source, balance_kind, request_status, request_kind, employee_role):
        enum.drop(bind, checkfirst=True)
