# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from leave_ledger.services.employee import EmployeeInfo, get_employee_service, require_employee

employees_router = APIRouter(prefix="/employees", tags=["employees"])


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        department=employee.department,
        position=employee.position,
        role=employee.role,
        monthly_salary=employee.monthly_salary,
        start_date=employee.start_date,
    )


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create or update an employee in the directory (admin only)."""
    employee = EmployeeInfo(id=employee_id, **payload.model_dump())
    get_employee_service().seed(employee)
    return _build_employee_response(employee)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get an employee from the directory."""
    return _build_employee_response(await require_employee(employee_id))


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    auth: AuthDep,
) -> EmployeeListResponse:
    """List all employees in the directory."""
    employees = await get_employee_service().list_employees()
    items = [_build_employee_response(e) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))
