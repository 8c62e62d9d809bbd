from sqlmodel import SQLModel

from leave_ledger.models.allocation import ALLOCATION_SETTING_ID, LeaveAllocationSetting
from leave_ledger.models.attendance import AttendanceRecord
from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import (
    LEDGERED_LEAVE_TYPES,
    AttendanceStatus,
    LeaveStatus,
    LeaveType,
    Quarter,
)
from leave_ledger.models.leave_request import LeaveRequest
from leave_ledger.models.ledger import QuarterlyLedgerEntry

__all__ = [
    "ALLOCATION_SETTING_ID",
    "LEDGERED_LEAVE_TYPES",
    "AttendanceRecord",
    "AttendanceStatus",
    "LeaveAllocationSetting",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "QuarterlyLedgerEntry",
    "Quarter",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
