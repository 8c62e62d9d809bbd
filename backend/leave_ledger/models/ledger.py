# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import timestamp_field


class QuarterlyLedgerEntry(SQLModel, table=True):
    """Per-employee, per-quarter leave counts.

    One row per (employee, fiscal year, quarter). Rows are created lazily
    with the allocation settings in force at that moment and are never
    deleted. ``available`` for a type is ``allocated + carried_forward - used``.
    """

    __tablename__ = "quarterly_leave_ledger"
    __table_args__ = (
        sa.PrimaryKeyConstraint("employee_id", "fiscal_year", "quarter"),
        sa.CheckConstraint("quarter IN ('Q1', 'Q2', 'Q3', 'Q4')", name="ck_ledger_quarter"),
    )

    employee_id: uuid.UUID = Field(sa_type=sa.Uuid, index=True)
    fiscal_year: int
    quarter: str = Field(max_length=2)

    allocated_sick: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    allocated_casual: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    allocated_paid: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_sick: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_casual: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_paid: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    carried_forward_sick: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    carried_forward_casual: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    carried_forward_paid: int = Field(default=0, sa_column_kwargs={"server_default": "0"})

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field(onupdate=True)

    def allocated(self, key: str) -> int:
        return int(getattr(self, f"allocated_{key}"))

    def used(self, key: str) -> int:
        return int(getattr(self, f"used_{key}"))

    def carried_forward(self, key: str) -> int:
        return int(getattr(self, f"carried_forward_{key}"))

    def available(self, key: str) -> int:
        return self.allocated(key) + self.carried_forward(key) - self.used(key)
