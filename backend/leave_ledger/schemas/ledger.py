# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from leave_ledger.models.enums import Quarter


class LeaveCounts(BaseModel):
    """Day counts per ledgered leave type."""

    sick: int
    casual: int
    paid: int


class QuarterlyBalanceResponse(BaseModel):
    """Allocated / used / carried-forward / available breakdown for one quarter."""

    employee_id: uuid.UUID
    fiscal_year: int
    quarter: Quarter
    allocated: LeaveCounts
    used: LeaveCounts
    carried_forward: LeaveCounts
    available: LeaveCounts
    updated_at: datetime | None


class QuarterlyLedgerListResponse(BaseModel):
    """An employee's ledger rows, newest quarter first."""

    items: list[QuarterlyBalanceResponse]
    total: int
