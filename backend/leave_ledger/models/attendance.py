# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import AttendanceStatus


class AttendanceRecord(UUIDBase, TimestampMixin, table=True):
    """Daily attendance mark for an employee."""

    __tablename__ = "attendance_record"
    __table_args__ = (sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),)

    employee_id: uuid.UUID = Field(index=True)
    date: datetime.date
    status: str = Field(default=AttendanceStatus.PRESENT, max_length=20)
    source_leave_id: uuid.UUID | None = None
