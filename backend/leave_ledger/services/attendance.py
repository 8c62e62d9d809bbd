# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import select
from sqlmodel import col

from leave_ledger.db import dialect_insert
from leave_ledger.models.attendance import AttendanceRecord
from leave_ledger.models.enums import AttendanceStatus
from leave_ledger.schemas.attendance import AttendanceListResponse, AttendanceResponse
from leave_ledger.services.fiscal import iter_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_TABLE: sa.Table = AttendanceRecord.__table__  # type: ignore[assignment]


def _build_attendance_response(record: AttendanceRecord) -> AttendanceResponse:
    return AttendanceResponse(
        id=record.id,
        employee_id=record.employee_id,
        date=record.date,
        status=AttendanceStatus(record.status),
        source_leave_id=record.source_leave_id,
    )


async def backfill_attendance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start: date,
    end: date,
    *,
    status: AttendanceStatus,
    source_leave_id: uuid.UUID | None = None,
) -> int:
    """Mark every date in ``start..end`` with ``status``, overwriting existing marks.

    Runs inside the caller's transaction. Returns the number of dates written.
    """
    rows = [
        {
            "id": uuid.uuid4(),
            "employee_id": employee_id,
            "date": day,
            "status": status.value,
            "source_leave_id": source_leave_id,
        }
        for day in iter_days(start, end)
    ]
    if not rows:
        return 0

    stmt = dialect_insert(session, _TABLE).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["employee_id", "date"],
        set_={"status": stmt.excluded.status, "source_leave_id": stmt.excluded.source_leave_id},
    )
    await session.execute(stmt)
    return len(rows)


async def clear_leave_attendance(session: AsyncSession, source_leave_id: uuid.UUID) -> int:
    """Remove the marks a leave approval wrote. Returns the number removed."""
    result = await session.execute(sa.delete(_TABLE).where(_TABLE.c.source_leave_id == source_leave_id))
    return int(result.rowcount or 0)


async def list_attendance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> AttendanceListResponse:
    """List an employee's attendance, optionally bounded by ``start``/``end`` (inclusive)."""
    filters = [col(AttendanceRecord.employee_id) == employee_id]
    if start is not None:
        filters.append(col(AttendanceRecord.date) >= start)
    if end is not None:
        filters.append(col(AttendanceRecord.date) <= end)

    result = await session.execute(
        select(AttendanceRecord).where(*filters).order_by(col(AttendanceRecord.date))
    )
    records = list(result.scalars().all())
    return AttendanceListResponse(items=[_build_attendance_response(r) for r in records], total=len(records))
