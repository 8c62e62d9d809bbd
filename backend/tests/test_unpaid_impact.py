"""Tests for the unpaid leave salary impact calculation."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest

from leave_ledger.exceptions import AppError
from leave_ledger.schemas.leave import UnpaidImpactPayload
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service
from leave_ledger.services.payroll import calculate_unpaid_impact

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient

EMPLOYEE_ID = uuid.uuid4()
HEADERS = {"X-User-Id": str(EMPLOYEE_ID)}
URL = "/leaves/calculate-unpaid-impact"


@pytest.fixture(autouse=True)
def _seed_employee_service() -> Iterator[None]:
    svc = InMemoryEmployeeService()
    svc.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            first_name="Asha",
            last_name="Rao",
            email="asha@example.com",
            monthly_salary=60000,
        )
    )
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


async def test_unpaid_impact(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        URL, json={"employeeId": str(EMPLOYEE_ID), "days": 5, "month": "2025-06"}, headers=HEADERS
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "employee_id": str(EMPLOYEE_ID),
        "employee_name": "Asha Rao",
        "month": "2025-06",
        "unpaid_leave_days": 5,
        "monthly_salary": 60000.0,
        "per_day_salary": 2000.0,
        "salary_deduction": 10000.0,
        "net_salary_after_deduction": 50000.0,
    }


async def test_unpaid_impact_rounds_to_cents() -> None:
    payload = UnpaidImpactPayload(employee_id=EMPLOYEE_ID, days=1, month="2025-07")
    result = await calculate_unpaid_impact(payload)
    assert result.per_day_salary == 1935.48
    assert result.salary_deduction == 1935.48
    assert result.net_salary_after_deduction == 58064.52


async def test_unpaid_impact_defaults_to_current_month() -> None:
    payload = UnpaidImpactPayload(employee_id=EMPLOYEE_ID, days=0)
    result = await calculate_unpaid_impact(payload, today=date(2024, 2, 10))
    assert result.month == "2024-02"
    assert result.per_day_salary == 2068.97
    assert result.salary_deduction == 0


async def test_unpaid_impact_unknown_employee() -> None:
    payload = UnpaidImpactPayload(employee_id=uuid.uuid4(), days=1)
    with pytest.raises(AppError) as exc_info:
        await calculate_unpaid_impact(payload)
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize("body", [{"days": -1}, {"days": 32}, {"days": 1, "month": "2025-13"}])
async def test_unpaid_impact_validation(async_client: AsyncClient, body: dict[str, object]) -> None:
    resp = await async_client.post(URL, json={"employeeId": str(EMPLOYEE_ID), **body}, headers=HEADERS)
    assert resp.status_code == 400
