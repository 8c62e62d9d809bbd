# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import AppError, InsufficientBalanceError
from leave_ledger.models.enums import AttendanceStatus, LeaveStatus, LeaveType, Quarter
from leave_ledger.models.leave_request import LeaveRequest
from leave_ledger.schemas.leave import LeaveListResponse, LeaveResponse
from leave_ledger.services.allocation import get_or_create_ledger_entry
from leave_ledger.services.attendance import backfill_attendance, clear_leave_attendance
from leave_ledger.services.employee import require_employee
from leave_ledger.services.fiscal import FiscalQuarter, count_days, resolve_quarter
from leave_ledger.services.ledger import QuarterlyLedgerRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.ledger import QuarterlyLedgerEntry
    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.leave import CreateLeavePayload, UpdateLeavePayload

logger = logging.getLogger(__name__)

# Status changes an approver may make. Everything else is rejected.
_ALLOWED_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset({LeaveStatus.REJECTED}),
    LeaveStatus.REJECTED: frozenset(),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(leave: LeaveRequest) -> LeaveResponse:
    """Map a leave request model to its response schema."""
    return LeaveResponse(
        id=leave.id,
        employee_id=leave.employee_id,
        leave_type=LeaveType(leave.leave_type),
        start_date=leave.start_date,
        end_date=leave.end_date,
        days=leave.days,
        reason=leave.reason,
        status=LeaveStatus(leave.status),
        fiscal_year=leave.fiscal_year,
        quarter=Quarter(leave.quarter),
        decided_at=leave.decided_at,
        decided_by=leave.decided_by,
        created_at=leave.created_at,
    )


def _period_of(leave: LeaveRequest) -> FiscalQuarter:
    return FiscalQuarter(leave.fiscal_year, Quarter(leave.quarter))


async def _get_leave_or_404(session: AsyncSession, leave_id: uuid.UUID) -> LeaveRequest:
    """Fetch a leave request by ID. Raises 404 if not found."""
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == leave_id))
    leave = result.scalar_one_or_none()
    if leave is None:
        raise AppError("Leave request not found", status_code=404)
    return leave


def _ensure_can_act_for(auth: AuthContext, employee_id: uuid.UUID) -> None:
    """Employees manage their own requests; approvers manage anyone's."""
    if auth.user_id != employee_id and not auth.is_approver:
        raise AppError("Not authorized to manage leave for this employee", status_code=403)


def _ensure_pending(leave: LeaveRequest, action: str) -> None:
    if leave.status != LeaveStatus.PENDING.value:
        raise AppError(f"Only pending leave requests can be {action}", status_code=400)


def _check_balance(entry: QuarterlyLedgerEntry, leave_type: LeaveType, days: int, add_back: int = 0) -> None:
    """Raise if the quarter cannot cover ``days`` after crediting ``add_back``."""
    available = entry.available(leave_type.ledger_key) + add_back
    if available < days:
        raise InsufficientBalanceError(leave_type.value, available=available, requested=days)


async def _check_leave_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_leave_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if a Pending or Approved request of the employee shares a date.

    Applies across leave types. Both ranges are inclusive, so two requests
    overlap when existing.start <= new.end AND existing.end >= new.start.
    """
    active_statuses = [LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value]
    query = select(LeaveRequest.id).where(
        col(LeaveRequest.employee_id) == employee_id,
        col(LeaveRequest.status).in_(active_statuses),
        col(LeaveRequest.start_date) <= end_date,
        col(LeaveRequest.end_date) >= start_date,
    )
    if exclude_leave_id is not None:
        query = query.where(col(LeaveRequest.id) != exclude_leave_id)

    result = await session.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise AppError("Leave request overlaps an existing pending or approved request", status_code=409)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeavePayload,
) -> LeaveResponse:
    """File a Pending leave request.

    1. Verify the employee exists and the caller may act for them.
    2. Reject dates already covered by a Pending or Approved request.
    3. Count days and resolve the fiscal quarter of the start date.
    4. For ledgered types, check the quarter's available balance.
    5. Persist the request. Nothing is deducted until approval.
    """
    _ensure_can_act_for(auth, payload.employee_id)
    await require_employee(payload.employee_id)

    await _check_leave_overlap(session, payload.employee_id, payload.start_date, payload.end_date)

    days = count_days(payload.start_date, payload.end_date)
    period = resolve_quarter(payload.start_date)

    if payload.leave_type.is_ledgered:
        entry = await get_or_create_ledger_entry(session, payload.employee_id, period)
        _check_balance(entry, payload.leave_type, days)

    leave = LeaveRequest(
        employee_id=payload.employee_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days=days,
        reason=payload.reason,
        status=LeaveStatus.PENDING.value,
        fiscal_year=period.fiscal_year,
        quarter=period.quarter.value,
    )
    session.add(leave)
    await session.commit()
    await session.refresh(leave)

    logger.info(
        "Leave %s filed: employee=%s type=%s days=%d period=%s",
        leave.id,
        leave.employee_id,
        leave.leave_type,
        days,
        period,
    )
    return _build_leave_response(leave)


async def update_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    payload: UpdateLeavePayload,
) -> LeaveResponse:
    """Apply either an approver status change or a requester edit."""
    leave = await _get_leave_or_404(session, leave_id)
    if payload.status is not None:
        return await _change_status(session, auth, leave, payload.status)
    return await _edit_pending(session, auth, leave, payload)


async def _edit_pending(
    session: AsyncSession,
    auth: AuthContext,
    leave: LeaveRequest,
    payload: UpdateLeavePayload,
) -> LeaveResponse:
    """Edit a Pending request, recomputing its day count and quarter.

    When the edit stays on the same employee, type and quarter, the
    request's current day count is credited back before the balance check
    so that it is not counted against itself.
    """
    _ensure_pending(leave, "edited")
    _ensure_can_act_for(auth, leave.employee_id)

    fields = payload.model_fields_set
    employee_id = payload.employee_id if payload.employee_id is not None else leave.employee_id
    leave_type = payload.leave_type if payload.leave_type is not None else LeaveType(leave.leave_type)
    start_date = payload.start_date if payload.start_date is not None else leave.start_date
    end_date = payload.end_date if payload.end_date is not None else leave.end_date
    reason = payload.reason if "reason" in fields else leave.reason

    if end_date < start_date:
        raise AppError("'to' must not be before 'from'", status_code=400)
    if employee_id != leave.employee_id:
        _ensure_can_act_for(auth, employee_id)
        await require_employee(employee_id)

    await _check_leave_overlap(session, employee_id, start_date, end_date, exclude_leave_id=leave.id)

    days = count_days(start_date, end_date)
    period = resolve_quarter(start_date)

    if leave_type.is_ledgered:
        entry = await get_or_create_ledger_entry(session, employee_id, period)
        same_reservation = (
            employee_id == leave.employee_id
            and leave_type.value == leave.leave_type
            and period == _period_of(leave)
        )
        _check_balance(entry, leave_type, days, add_back=leave.days if same_reservation else 0)

    leave.employee_id = employee_id
    leave.leave_type = leave_type.value
    leave.start_date = start_date
    leave.end_date = end_date
    leave.reason = reason
    leave.days = days
    leave.fiscal_year = period.fiscal_year
    leave.quarter = period.quarter.value

    await session.commit()
    await session.refresh(leave)
    logger.info("Leave %s edited: type=%s days=%d period=%s", leave.id, leave.leave_type, days, period)
    return _build_leave_response(leave)


async def _change_status(
    session: AsyncSession,
    auth: AuthContext,
    leave: LeaveRequest,
    new_status: LeaveStatus,
) -> LeaveResponse:
    """Move a request through its lifecycle, applying the ledger side effect.

    Pending -> Approved: consume days from the request's quarter and mark
    attendance for each date. Approved -> Rejected: give the days back
    (floored at zero) and drop those attendance marks. Pending -> Rejected
    touches nothing else.
    """
    if not auth.is_approver:
        raise AppError("Approver role required to change leave status", status_code=403)

    current = LeaveStatus(leave.status)
    if new_status == current:
        raise AppError(f"Leave request is already {current.value}", status_code=400)
    if new_status not in _ALLOWED_TRANSITIONS[current]:
        raise AppError(f"Cannot change leave status from {current.value} to {new_status.value}", status_code=400)

    leave_type = LeaveType(leave.leave_type)
    period = _period_of(leave)
    repo = QuarterlyLedgerRepository(session)

    if current is LeaveStatus.PENDING and new_status is LeaveStatus.APPROVED:
        if leave_type.is_ledgered:
            await get_or_create_ledger_entry(session, leave.employee_id, period)
            if not await repo.try_consume(leave.employee_id, period, leave_type, leave.days):
                entry = await repo.get_or_404(leave.employee_id, period)
                raise InsufficientBalanceError(
                    leave_type.value, available=entry.available(leave_type.ledger_key), requested=leave.days
                )
        await backfill_attendance(
            session,
            leave.employee_id,
            leave.start_date,
            leave.end_date,
            status=AttendanceStatus.PRESENT,
            source_leave_id=leave.id,
        )
    elif current is LeaveStatus.APPROVED and new_status is LeaveStatus.REJECTED:
        if leave_type.is_ledgered and not await repo.release(leave.employee_id, period, leave_type, leave.days):
            raise AppError(f"No leave ledger entry for {period}", status_code=404)
        await clear_leave_attendance(session, leave.id)

    leave.status = new_status.value
    leave.decided_at = datetime.now(UTC)
    leave.decided_by = auth.user_id

    await session.commit()
    await session.refresh(leave)
    logger.info(
        "Leave %s %s -> %s by %s (type=%s days=%d period=%s)",
        leave.id,
        current.value,
        new_status.value,
        auth.user_id,
        leave_type.value,
        leave.days,
        period,
    )
    return _build_leave_response(leave)


async def delete_leave(session: AsyncSession, auth: AuthContext, leave_id: uuid.UUID) -> None:
    """Delete a Pending request."""
    leave = await _get_leave_or_404(session, leave_id)
    _ensure_pending(leave, "deleted")
    _ensure_can_act_for(auth, leave.employee_id)

    await session.delete(leave)
    await session.commit()
    logger.info("Leave %s deleted by %s", leave_id, auth.user_id)


async def get_leave(session: AsyncSession, leave_id: uuid.UUID) -> LeaveResponse:
    """Get a single leave request by ID."""
    leave = await _get_leave_or_404(session, leave_id)
    return _build_leave_response(leave)


async def list_leaves(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: LeaveStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveListResponse:
    """List leave requests with optional filters, newest first."""
    filters = []
    if employee_id is not None:
        filters.append(col(LeaveRequest.employee_id) == employee_id)
    if status_filter is not None:
        filters.append(col(LeaveRequest.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*filters)
        .order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.start_date).desc())
        .offset(offset)
        .limit(limit)
    )
    leaves = list(result.scalars().all())
    return LeaveListResponse(items=[_build_leave_response(leave) for leave in leaves], total=total)
