from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel

from leave_ledger.models.base import timestamp_field

ALLOCATION_SETTING_ID = 1


class LeaveAllocationSetting(SQLModel, table=True):
    """Company-wide days granted per quarter for each ledgered leave type.

    A single row keyed by ``ALLOCATION_SETTING_ID``.
    """

    __tablename__ = "leave_allocation_setting"

    id: int = Field(default=ALLOCATION_SETTING_ID, primary_key=True)
    sick: int = Field(ge=0)
    casual: int = Field(ge=0)
    paid: int = Field(ge=0)
    updated_at: datetime = timestamp_field(onupdate=True)
