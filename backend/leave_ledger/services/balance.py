from __future__ import annotations

from typing import TYPE_CHECKING

from leave_ledger.services.allocation import get_or_create_ledger_entry
from leave_ledger.services.employee import require_employee
from leave_ledger.services.fiscal import current_quarter
from leave_ledger.services.ledger import (
    QuarterlyLedgerRepository,
    build_balance_response,
    build_ledger_list_response,
)

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.ledger import QuarterlyBalanceResponse, QuarterlyLedgerListResponse
    from leave_ledger.services.fiscal import FiscalQuarter


async def get_quarterly_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    period: FiscalQuarter | None = None,
) -> QuarterlyBalanceResponse:
    """Return the allocated/used/carried-forward/available breakdown for a quarter.

    Defaults to the current quarter. The ledger row is created on first
    access with the allocation in force at that moment.
    """
    await require_employee(employee_id)
    entry = await get_or_create_ledger_entry(session, employee_id, period or current_quarter())
    await session.commit()
    return build_balance_response(entry)


async def list_quarterly_ledger(session: AsyncSession, employee_id: uuid.UUID) -> QuarterlyLedgerListResponse:
    """Return every ledger row of an employee, newest quarter first."""
    await require_employee(employee_id)
    entries = await QuarterlyLedgerRepository(session).list_for_employee(employee_id)
    return build_ledger_list_response(entries)
