from __future__ import annotations

import calendar
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.schemas.leave import UnpaidImpactResponse
from leave_ledger.services.employee import require_employee

if TYPE_CHECKING:
    from leave_ledger.schemas.leave import UnpaidImpactPayload


def _parse_month(month: str | None, today: date | None = None) -> tuple[int, int]:
    if month is None:
        today = today or date.today()
        return today.year, today.month
    year, month_number = month.split("-")
    return int(year), int(month_number)


async def calculate_unpaid_impact(payload: UnpaidImpactPayload, today: date | None = None) -> UnpaidImpactResponse:
    """Salary deducted for ``days`` of unpaid leave in a month.

    The monthly salary is spread evenly over the calendar days of that
    month; amounts are rounded to two decimals.
    """
    employee = await require_employee(payload.employee_id)
    year, month = _parse_month(payload.month, today)
    days_in_month = calendar.monthrange(year, month)[1]

    per_day = employee.monthly_salary / days_in_month
    deduction = per_day * payload.days
    return UnpaidImpactResponse(
        employee_id=employee.id,
        employee_name=employee.full_name,
        month=f"{year:04d}-{month:02d}",
        unpaid_leave_days=payload.days,
        monthly_salary=round(employee.monthly_salary, 2),
        per_day_salary=round(per_day, 2),
        salary_deduction=round(deduction, 2),
        net_salary_after_deduction=round(employee.monthly_salary - deduction, 2),
    )
