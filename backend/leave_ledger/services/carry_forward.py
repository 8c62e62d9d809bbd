"""Quarter-end carry-forward of unused leave.

The available balance of each ledgered type in the source quarter is
written as the carried-forward count of the following quarter. The write
overwrites; running it again for the same source quarter replaces the
destination's carried-forward counts rather than adding to them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from leave_ledger.exceptions import AppError
from leave_ledger.models.enums import LEDGERED_LEAVE_TYPES, LeaveType
from leave_ledger.schemas.leave import CarryForwardResponse
from leave_ledger.schemas.ledger import LeaveCounts
from leave_ledger.services.allocation import get_or_create_ledger_entry
from leave_ledger.services.employee import require_employee
from leave_ledger.services.ledger import QuarterlyLedgerRepository

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.fiscal import FiscalQuarter

logger = logging.getLogger(__name__)


@dataclass
class CarryForwardRunResult:
    """Result of a carry-forward run across employees."""

    source: FiscalQuarter
    target: FiscalQuarter
    processed: int = 0
    errors: int = 0
    details: list[dict[str, object]] = field(default_factory=list)


async def _carry_employee(
    session: AsyncSession,
    employee_id: uuid.UUID,
    source: FiscalQuarter,
) -> dict[LeaveType, int]:
    """Copy one employee's source-quarter availability into the next quarter. Does not commit."""
    repo = QuarterlyLedgerRepository(session)
    source_entry = await repo.get_or_404(employee_id, source)

    # Available can only go negative when allocations were lowered after use.
    counts = {lt: max(source_entry.available(lt.ledger_key), 0) for lt in LEDGERED_LEAVE_TYPES}

    target = source.next()
    await get_or_create_ledger_entry(session, employee_id, target)
    await repo.set_carried_forward(employee_id, target, counts)
    return counts


async def carry_forward(
    session: AsyncSession,
    employee_id: uuid.UUID,
    source: FiscalQuarter,
) -> CarryForwardResponse:
    """Carry one employee's unused leave from ``source`` into the next quarter."""
    await require_employee(employee_id)
    counts = await _carry_employee(session, employee_id, source)
    await session.commit()

    target = source.next()
    logger.info(
        "Carried forward %s -> %s for employee %s: %s",
        source,
        target,
        employee_id,
        {lt.ledger_key: days for lt, days in counts.items()},
    )
    return CarryForwardResponse(
        employee_id=employee_id,
        from_year=source.fiscal_year,
        from_quarter=source.quarter,
        to_year=target.fiscal_year,
        to_quarter=target.quarter,
        carried_forward=LeaveCounts(**{lt.ledger_key: days for lt, days in counts.items()}),
    )


async def run_carry_forward(session: AsyncSession, source: FiscalQuarter) -> CarryForwardRunResult:
    """Carry forward every employee that has a ledger row in ``source``.

    One employee failing is counted and logged; the rest of the run
    continues and is committed together.
    """
    result = CarryForwardRunResult(source=source, target=source.next())
    employee_ids = await QuarterlyLedgerRepository(session).list_employee_ids(source)

    for employee_id in employee_ids:
        try:
            counts = await _carry_employee(session, employee_id, source)
        except AppError:
            logger.exception("Carry-forward failed for employee %s from %s", employee_id, source)
            result.errors += 1
            continue
        result.processed += 1
        result.details.append(
            {"employee_id": str(employee_id), **{lt.ledger_key: days for lt, days in counts.items()}}
        )

    await session.commit()
    logger.info(
        "Carry-forward run %s -> %s: processed=%d errors=%d",
        result.source,
        result.target,
        result.processed,
        result.errors,
    )
    return result
