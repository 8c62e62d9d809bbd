"""Tests for per-quarter leave allocation settings."""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service
from leave_ledger.services.fiscal import current_quarter

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient

EMPLOYEE_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()

EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
ADMIN_HEADERS = {"X-User-Id": str(ADMIN_ID), "X-Role": "Admin"}
ALLOCATIONS_URL = "/leave-allocations"


@pytest.fixture(autouse=True)
def _seed_employee_service() -> Iterator[None]:
    svc = InMemoryEmployeeService()
    svc.seed(EmployeeInfo(id=EMPLOYEE_ID, first_name="Asha", last_name="Rao", email="asha@example.com"))
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


async def test_default_allocation(async_client: AsyncClient) -> None:
    resp = await async_client.get(ALLOCATIONS_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"sick": 2, "casual": 2, "paid": 2, "updated_at": None}


async def test_update_allocation(async_client: AsyncClient) -> None:
    resp = await async_client.put(ALLOCATIONS_URL, json={"sick": 3, "casual": 4, "paid": 5}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert (data["sick"], data["casual"], data["paid"]) == (3, 4, 5)
    assert data["updated_at"] is not None

    resp = await async_client.put(ALLOCATIONS_URL, json={"sick": 1, "casual": 1, "paid": 1}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200

    data = (await async_client.get(ALLOCATIONS_URL, headers=EMPLOYEE_HEADERS)).json()
    assert (data["sick"], data["casual"], data["paid"]) == (1, 1, 1)


async def test_update_allocation_admin_only(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        ALLOCATIONS_URL, json={"sick": 3, "casual": 3, "paid": 3}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


@pytest.mark.parametrize("value", [-1, 31])
async def test_update_allocation_out_of_range(async_client: AsyncClient, value: int) -> None:
    resp = await async_client.put(
        ALLOCATIONS_URL, json={"sick": value, "casual": 2, "paid": 2}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 400


async def test_new_allocation_applies_to_new_rows_only(async_client: AsyncClient) -> None:
    balance_url = f"/leaves/{EMPLOYEE_ID}/quarterly-balance"
    existing = await async_client.get(
        balance_url, params={"fiscal_year": 2025, "quarter": "Q1"}, headers=EMPLOYEE_HEADERS
    )
    assert existing.json()["allocated"]["sick"] == 2

    await async_client.put(ALLOCATIONS_URL, json={"sick": 4, "casual": 4, "paid": 4}, headers=ADMIN_HEADERS)

    existing = await async_client.get(
        balance_url, params={"fiscal_year": 2025, "quarter": "Q1"}, headers=EMPLOYEE_HEADERS
    )
    assert existing.json()["allocated"]["sick"] == 2

    fresh = await async_client.get(balance_url, params={"fiscal_year": 2025, "quarter": "Q2"}, headers=EMPLOYEE_HEADERS)
    assert fresh.json()["allocated"] == {"sick": 4, "casual": 4, "paid": 4}


async def test_apply_to_current_quarter(async_client: AsyncClient) -> None:
    period = current_quarter()
    balance_url = f"/leaves/{EMPLOYEE_ID}/quarterly-balance"
    before = await async_client.get(balance_url, headers=EMPLOYEE_HEADERS)
    assert before.json()["allocated"]["casual"] == 2

    await async_client.put(ALLOCATIONS_URL, json={"sick": 6, "casual": 7, "paid": 8}, headers=ADMIN_HEADERS)
    resp = await async_client.post(f"{ALLOCATIONS_URL}/apply-to-current-quarter", headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["fiscal_year"] == period.fiscal_year
    assert data["quarter"] == period.quarter.value
    assert data["updated"] == 1
    assert data["allocation"]["casual"] == 7

    after = await async_client.get(balance_url, headers=EMPLOYEE_HEADERS)
    assert after.json()["allocated"] == {"sick": 6, "casual": 7, "paid": 8}


async def test_apply_to_current_quarter_admin_only(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"{ALLOCATIONS_URL}/apply-to-current-quarter", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_apply_to_future_is_apply_to_current_quarter(async_client: AsyncClient) -> None:
    balance_url = f"/leaves/{EMPLOYEE_ID}/quarterly-balance"
    await async_client.get(balance_url, headers=EMPLOYEE_HEADERS)

    await async_client.put(ALLOCATIONS_URL, json={"sick": 5, "casual": 5, "paid": 5}, headers=ADMIN_HEADERS)
    resp = await async_client.post(f"{ALLOCATIONS_URL}/apply-to-future", headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["updated"] == 1

    after = await async_client.get(balance_url, headers=EMPLOYEE_HEADERS)
    assert after.json()["allocated"] == {"sick": 5, "casual": 5, "paid": 5}

    resp = await async_client.post(f"{ALLOCATIONS_URL}/apply-to-future", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_lowered_allocation_reports_no_balance_left(async_client: AsyncClient) -> None:
    """Cutting the allocation below what was already used never reports a negative balance."""
    start = current_quarter().start_date
    resp = await async_client.post(
        "/leaves",
        json={
            "employeeId": str(EMPLOYEE_ID),
            "type": "Paid",
            "from": start.isoformat(),
            "to": (start + timedelta(days=1)).isoformat(),
        },
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    resp = await async_client.put(f"/leaves/{resp.json()['id']}", json={"status": "Approved"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200, resp.text

    await async_client.put(ALLOCATIONS_URL, json={"sick": 2, "casual": 2, "paid": 1}, headers=ADMIN_HEADERS)
    await async_client.post(f"{ALLOCATIONS_URL}/apply-to-current-quarter", headers=ADMIN_HEADERS)

    day = (start + timedelta(days=7)).isoformat()
    resp = await async_client.post(
        "/leaves",
        json={"employeeId": str(EMPLOYEE_ID), "type": "Paid", "from": day, "to": day},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient Paid leave balance. Available: 0, Requested: 1"
