from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.models.allocation import ALLOCATION_SETTING_ID, LeaveAllocationSetting
from leave_ledger.schemas.allocation import ApplyAllocationResponse, LeaveAllocationResponse
from leave_ledger.services.fiscal import current_quarter
from leave_ledger.services.ledger import QuarterlyLedgerRepository

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.ledger import QuarterlyLedgerEntry
    from leave_ledger.schemas.allocation import LeaveAllocationPayload
    from leave_ledger.services.fiscal import FiscalQuarter

logger = logging.getLogger(__name__)


def _default_allocation() -> LeaveAllocationSetting:
    settings = get_settings()
    return LeaveAllocationSetting(
        sick=settings.default_sick_allocation,
        casual=settings.default_casual_allocation,
        paid=settings.default_paid_allocation,
    )


def _build_allocation_response(setting: LeaveAllocationSetting, *, persisted: bool) -> LeaveAllocationResponse:
    return LeaveAllocationResponse(
        sick=setting.sick,
        casual=setting.casual,
        paid=setting.paid,
        updated_at=setting.updated_at if persisted else None,
    )


async def _get_stored_allocation(session: AsyncSession) -> LeaveAllocationSetting | None:
    result = await session.execute(
        select(LeaveAllocationSetting).where(col(LeaveAllocationSetting.id) == ALLOCATION_SETTING_ID)
    )
    return result.scalar_one_or_none()


async def get_allocation(session: AsyncSession) -> LeaveAllocationSetting:
    """Return the saved allocation, falling back to the configured defaults."""
    stored = await _get_stored_allocation(session)
    return stored if stored is not None else _default_allocation()


async def read_allocation(session: AsyncSession) -> LeaveAllocationResponse:
    stored = await _get_stored_allocation(session)
    if stored is None:
        return _build_allocation_response(_default_allocation(), persisted=False)
    return _build_allocation_response(stored, persisted=True)


async def update_allocation(session: AsyncSession, payload: LeaveAllocationPayload) -> LeaveAllocationResponse:
    """Save the per-quarter allocation. Existing ledger rows keep their allocation."""
    stored = await _get_stored_allocation(session)
    if stored is None:
        stored = LeaveAllocationSetting(sick=payload.sick, casual=payload.casual, paid=payload.paid)
        session.add(stored)
    else:
        stored.sick = payload.sick
        stored.casual = payload.casual
        stored.paid = payload.paid

    await session.commit()
    await session.refresh(stored)
    logger.info("Leave allocation updated: sick=%d casual=%d paid=%d", stored.sick, stored.casual, stored.paid)
    return _build_allocation_response(stored, persisted=True)


async def apply_allocation_to_current_quarter(
    session: AsyncSession,
    today: date | None = None,
) -> ApplyAllocationResponse:
    """Overwrite the allocated counts of every ledger row in the current quarter."""
    period = current_quarter(today)
    stored = await _get_stored_allocation(session)
    allocation = stored if stored is not None else _default_allocation()

    repo = QuarterlyLedgerRepository(session)
    updated = await repo.apply_allocation(period, allocation)
    await session.commit()

    logger.info("Applied leave allocation to %d ledger rows for %s", updated, period)
    return ApplyAllocationResponse(
        fiscal_year=period.fiscal_year,
        quarter=period.quarter,
        updated=updated,
        allocation=_build_allocation_response(allocation, persisted=stored is not None),
    )


async def get_or_create_ledger_entry(
    session: AsyncSession,
    employee_id: uuid.UUID,
    period: FiscalQuarter,
) -> QuarterlyLedgerEntry:
    """Fetch an employee's ledger row for a quarter, creating it with the current allocation."""
    allocation = await get_allocation(session)
    return await QuarterlyLedgerRepository(session).get_or_create(employee_id, period, allocation)
