"""Tests for QuarterlyLedgerRepository: lazy row creation and atomic balance updates."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from leave_ledger.exceptions import AppError
from leave_ledger.models.allocation import LeaveAllocationSetting
from leave_ledger.models.enums import LeaveType, Quarter
from leave_ledger.services.fiscal import FiscalQuarter
from leave_ledger.services.ledger import QuarterlyLedgerRepository, build_balance_response

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

EMPLOYEE_ID = uuid.uuid4()
PERIOD = FiscalQuarter(2025, Quarter.Q1)
ALLOCATION = LeaveAllocationSetting(sick=2, casual=3, paid=4)


async def test_get_missing_row(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    assert await repo.get(EMPLOYEE_ID, PERIOD) is None
    with pytest.raises(AppError) as exc_info:
        await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert exc_info.value.status_code == 404


async def test_get_or_create_uses_allocation(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    entry = await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await db_session.commit()

    assert entry.fiscal_year == 2025
    assert entry.quarter == "Q1"
    assert (entry.allocated_sick, entry.allocated_casual, entry.allocated_paid) == (2, 3, 4)
    assert (entry.used_sick, entry.used_casual, entry.used_paid) == (0, 0, 0)
    assert entry.available("paid") == 4


async def test_get_or_create_is_idempotent(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    entry = await repo.get_or_create(EMPLOYEE_ID, PERIOD, LeaveAllocationSetting(sick=9, casual=9, paid=9))
    await db_session.commit()

    assert entry.allocated_sick == 2
    assert len(await repo.list_for_employee(EMPLOYEE_ID)) == 1


async def test_try_consume_within_balance(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)

    assert await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.CASUAL, 3) is True
    entry = await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert entry.used_casual == 3
    assert entry.available("casual") == 0


async def test_try_consume_refuses_overdraw(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)

    assert await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.SICK, 3) is False
    entry = await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert entry.used_sick == 0


async def test_try_consume_counts_carried_forward(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.set_carried_forward(EMPLOYEE_ID, PERIOD, {LeaveType.SICK: 1})

    assert await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.SICK, 3) is True
    entry = await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert entry.available("sick") == 0


async def test_try_consume_missing_row(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    assert await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.SICK, 1) is False


async def test_unpaid_is_not_ledgered(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    with pytest.raises(AppError) as exc_info:
        await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.UNPAID, 1)
    assert exc_info.value.status_code == 400


async def test_release_floors_at_zero(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.PAID, 1)

    assert await repo.release(EMPLOYEE_ID, PERIOD, LeaveType.PAID, 3) is True
    entry = await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert entry.used_paid == 0


async def test_release_missing_row(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    assert await repo.release(EMPLOYEE_ID, PERIOD, LeaveType.PAID, 1) is False


async def test_set_carried_forward_overwrites(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.set_carried_forward(EMPLOYEE_ID, PERIOD, {LeaveType.SICK: 2, LeaveType.CASUAL: 1})
    await repo.set_carried_forward(EMPLOYEE_ID, PERIOD, {LeaveType.SICK: 1, LeaveType.CASUAL: 0})

    entry = await repo.get_or_404(EMPLOYEE_ID, PERIOD)
    assert entry.carried_forward_sick == 1
    assert entry.carried_forward_casual == 0


async def test_apply_allocation_touches_only_that_quarter(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    other = uuid.uuid4()
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.get_or_create(other, PERIOD, ALLOCATION)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD.next(), ALLOCATION)

    updated = await repo.apply_allocation(PERIOD, LeaveAllocationSetting(sick=5, casual=5, paid=5))
    assert updated == 2

    assert (await repo.get_or_404(other, PERIOD)).allocated_sick == 5
    assert (await repo.get_or_404(EMPLOYEE_ID, PERIOD.next())).allocated_sick == 2


async def test_list_for_employee_newest_first(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    for period in (PERIOD, PERIOD.next(), FiscalQuarter(2024, Quarter.Q4)):
        await repo.get_or_create(EMPLOYEE_ID, period, ALLOCATION)

    entries = await repo.list_for_employee(EMPLOYEE_ID)
    assert [(e.fiscal_year, e.quarter) for e in entries] == [(2025, "Q2"), (2025, "Q1"), (2024, "Q4")]


async def test_list_employee_ids(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    other = uuid.uuid4()
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.get_or_create(other, PERIOD, ALLOCATION)
    await repo.get_or_create(uuid.uuid4(), PERIOD.next(), ALLOCATION)

    assert set(await repo.list_employee_ids(PERIOD)) == {EMPLOYEE_ID, other}


async def test_build_balance_response(db_session: AsyncSession) -> None:
    repo = QuarterlyLedgerRepository(db_session)
    await repo.get_or_create(EMPLOYEE_ID, PERIOD, ALLOCATION)
    await repo.try_consume(EMPLOYEE_ID, PERIOD, LeaveType.SICK, 1)
    await repo.set_carried_forward(EMPLOYEE_ID, PERIOD, {LeaveType.PAID: 2})

    response = build_balance_response(await repo.get_or_404(EMPLOYEE_ID, PERIOD))
    assert response.quarter is Quarter.Q1
    assert response.allocated.model_dump() == {"sick": 2, "casual": 3, "paid": 4}
    assert response.used.model_dump() == {"sick": 1, "casual": 0, "paid": 0}
    assert response.carried_forward.model_dump() == {"sick": 0, "casual": 0, "paid": 2}
    assert response.available.model_dump() == {"sick": 1, "casual": 3, "paid": 6}
