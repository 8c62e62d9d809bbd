"""Initial schema: leave requests, quarterly ledger, attendance, allocation settings

Revision ID: 0001
Revises:
Create Date: 2025-06-02 10:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str, *, onupdate: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
        **({"onupdate": sa.func.now()} if onupdate else {}),
    )


def upgrade() -> None:
    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _timestamp("created_at"),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="Pending", nullable=False),
        sa.Column("fiscal_year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.String(length=2), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.CheckConstraint("quarter IN ('Q1', 'Q2', 'Q3', 'Q4')", name="ck_leave_request_quarter"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_range"),
    )
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_employee_status", "leave_request", ["employee_id", "status"])

    counts = [
        sa.Column(f"{kind}_{leave_type}", sa.Integer(), server_default="0", nullable=False)
        for kind in ("allocated", "used", "carried_forward")
        for leave_type in ("sick", "casual", "paid")
    ]
    op.create_table(
        "quarterly_leave_ledger",
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("fiscal_year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.String(length=2), nullable=False),
        *counts,
        _timestamp("created_at"),
        _timestamp("updated_at", onupdate=True),
        sa.PrimaryKeyConstraint("employee_id", "fiscal_year", "quarter"),
        sa.CheckConstraint("quarter IN ('Q1', 'Q2', 'Q3', 'Q4')", name="ck_ledger_quarter"),
    )
    op.create_index("ix_quarterly_leave_ledger_employee_id", "quarterly_leave_ledger", ["employee_id"])

    op.create_table(
        "attendance_record",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _timestamp("created_at"),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("source_leave_id", sa.Uuid(), nullable=True),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )
    op.create_index("ix_attendance_record_employee_id", "attendance_record", ["employee_id"])

    op.create_table(
        "leave_allocation_setting",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sick", sa.Integer(), nullable=False),
        sa.Column("casual", sa.Integer(), nullable=False),
        sa.Column("paid", sa.Integer(), nullable=False),
        _timestamp("updated_at", onupdate=True),
    )


def downgrade() -> None:
    op.drop_table("leave_allocation_setting")
    op.drop_index("ix_attendance_record_employee_id", table_name="attendance_record")
    op.drop_table("attendance_record")
    op.drop_index("ix_quarterly_leave_ledger_employee_id", table_name="quarterly_leave_ledger")
    op.drop_table("quarterly_leave_ledger")
    op.drop_index("ix_leave_request_employee_status", table_name="leave_request")
    op.drop_index("ix_leave_request_status", table_name="leave_request")
    op.drop_index("ix_leave_request_employee_id", table_name="leave_request")
    op.drop_table("leave_request")
