"""Quarterly leave ledger storage.

``QuarterlyLedgerRepository`` is the only code that writes
``quarterly_leave_ledger``. Row creation is an insert-if-absent and every
balance change is one conditional UPDATE, so two approvals racing on the
same employee and quarter cannot both spend the same days.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import select
from sqlmodel import col

from leave_ledger.db import dialect_insert
from leave_ledger.exceptions import AppError
from leave_ledger.models.enums import LEDGERED_LEAVE_TYPES, LeaveType, Quarter
from leave_ledger.models.ledger import QuarterlyLedgerEntry
from leave_ledger.schemas.ledger import LeaveCounts, QuarterlyBalanceResponse, QuarterlyLedgerListResponse
from leave_ledger.services.fiscal import FiscalQuarter

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.allocation import LeaveAllocationSetting

logger = logging.getLogger(__name__)

_TABLE: sa.Table = QuarterlyLedgerEntry.__table__  # type: ignore[assignment]
_KEY_COLUMNS = ["employee_id", "fiscal_year", "quarter"]


def _key_filter(employee_id: uuid.UUID, period: FiscalQuarter) -> list[sa.ColumnElement[bool]]:
    return [
        _TABLE.c.employee_id == employee_id,
        _TABLE.c.fiscal_year == period.fiscal_year,
        _TABLE.c.quarter == period.quarter.value,
    ]


def _available_expr(key: str) -> sa.ColumnElement[int]:
    return _TABLE.c[f"allocated_{key}"] + _TABLE.c[f"carried_forward_{key}"] - _TABLE.c[f"used_{key}"]


def _require_ledgered(leave_type: LeaveType) -> str:
    if not leave_type.is_ledgered:
        raise AppError(f"{leave_type.value} leave is not tracked on the quarterly ledger", status_code=400)
    return leave_type.ledger_key


class QuarterlyLedgerRepository:
    """Reads and atomic writes for ``QuarterlyLedgerEntry`` rows. Callers own the commit."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self,
        employee_id: uuid.UUID,
        period: FiscalQuarter,
        *,
        for_update: bool = False,
    ) -> QuarterlyLedgerEntry | None:
        query = (
            select(QuarterlyLedgerEntry)
            .where(
                col(QuarterlyLedgerEntry.employee_id) == employee_id,
                col(QuarterlyLedgerEntry.fiscal_year) == period.fiscal_year,
                col(QuarterlyLedgerEntry.quarter) == period.quarter.value,
            )
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def get_or_404(self, employee_id: uuid.UUID, period: FiscalQuarter) -> QuarterlyLedgerEntry:
        entry = await self.get(employee_id, period)
        if entry is None:
            raise AppError(f"No leave ledger entry for {period}", status_code=404)
        return entry

    async def get_or_create(
        self,
        employee_id: uuid.UUID,
        period: FiscalQuarter,
        allocation: LeaveAllocationSetting,
    ) -> QuarterlyLedgerEntry:
        """Return the row for (employee, quarter), inserting it with ``allocation`` if absent."""
        stmt = (
            dialect_insert(self._session, _TABLE)
            .values(
                employee_id=employee_id,
                fiscal_year=period.fiscal_year,
                quarter=period.quarter.value,
                allocated_sick=allocation.sick,
                allocated_casual=allocation.casual,
                allocated_paid=allocation.paid,
            )
            .on_conflict_do_nothing(index_elements=_KEY_COLUMNS)
        )
        result = await self._session.execute(stmt)
        if result.rowcount:
            logger.info("Created leave ledger row for employee %s in %s", employee_id, period)

        entry = await self.get(employee_id, period)
        if entry is None:
            raise AppError(f"Leave ledger row for {period} vanished after upsert")
        return entry

    async def try_consume(
        self,
        employee_id: uuid.UUID,
        period: FiscalQuarter,
        leave_type: LeaveType,
        days: int,
    ) -> bool:
        """Add ``days`` to used if the quarter still has them available. Returns False otherwise."""
        key = _require_ledgered(leave_type)
        used = _TABLE.c[f"used_{key}"]
        result = await self._session.execute(
            sa.update(_TABLE)
            .where(*_key_filter(employee_id, period), _available_expr(key) >= days)
            .values({used: used + days})
        )
        return bool(result.rowcount)

    async def release(
        self,
        employee_id: uuid.UUID,
        period: FiscalQuarter,
        leave_type: LeaveType,
        days: int,
    ) -> bool:
        """Subtract ``days`` from used, flooring at zero. Returns False if the row is missing."""
        key = _require_ledgered(leave_type)
        used = _TABLE.c[f"used_{key}"]
        result = await self._session.execute(
            sa.update(_TABLE)
            .where(*_key_filter(employee_id, period))
            .values({used: sa.case((used > days, used - days), else_=0)})
        )
        return bool(result.rowcount)

    async def set_carried_forward(
        self,
        employee_id: uuid.UUID,
        period: FiscalQuarter,
        counts: dict[LeaveType, int],
    ) -> None:
        """Overwrite the carried-forward counts of an existing row."""
        values = {_TABLE.c[f"carried_forward_{lt.ledger_key}"]: days for lt, days in counts.items()}
        await self._session.execute(sa.update(_TABLE).where(*_key_filter(employee_id, period)).values(values))

    async def apply_allocation(self, period: FiscalQuarter, allocation: LeaveAllocationSetting) -> int:
        """Overwrite allocated counts on every row of ``period``. Returns rows touched."""
        result = await self._session.execute(
            sa.update(_TABLE)
            .where(
                _TABLE.c.fiscal_year == period.fiscal_year,
                _TABLE.c.quarter == period.quarter.value,
            )
            .values(
                allocated_sick=allocation.sick,
                allocated_casual=allocation.casual,
                allocated_paid=allocation.paid,
            )
        )
        return int(result.rowcount or 0)

    async def list_for_employee(self, employee_id: uuid.UUID) -> list[QuarterlyLedgerEntry]:
        result = await self._session.execute(
            select(QuarterlyLedgerEntry)
            .where(col(QuarterlyLedgerEntry.employee_id) == employee_id)
            .order_by(col(QuarterlyLedgerEntry.fiscal_year).desc(), col(QuarterlyLedgerEntry.quarter).desc())
        )
        return list(result.scalars().all())

    async def list_employee_ids(self, period: FiscalQuarter) -> list[uuid.UUID]:
        result = await self._session.execute(
            select(col(QuarterlyLedgerEntry.employee_id))
            .where(
                col(QuarterlyLedgerEntry.fiscal_year) == period.fiscal_year,
                col(QuarterlyLedgerEntry.quarter) == period.quarter.value,
            )
            .order_by(col(QuarterlyLedgerEntry.employee_id))
        )
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------


def _counts(entry: QuarterlyLedgerEntry, attr: str) -> LeaveCounts:
    values = {lt.ledger_key: getattr(entry, attr)(lt.ledger_key) for lt in LEDGERED_LEAVE_TYPES}
    return LeaveCounts(**values)


def build_balance_response(entry: QuarterlyLedgerEntry) -> QuarterlyBalanceResponse:
    """Map a ledger row to its allocated/used/carried-forward/available breakdown."""
    return QuarterlyBalanceResponse(
        employee_id=entry.employee_id,
        fiscal_year=entry.fiscal_year,
        quarter=Quarter(entry.quarter),
        allocated=_counts(entry, "allocated"),
        used=_counts(entry, "used"),
        carried_forward=_counts(entry, "carried_forward"),
        available=_counts(entry, "available"),
        updated_at=entry.updated_at,
    )


def build_ledger_list_response(entries: list[QuarterlyLedgerEntry]) -> QuarterlyLedgerListResponse:
    return QuarterlyLedgerListResponse(items=[build_balance_response(e) for e in entries], total=len(entries))
