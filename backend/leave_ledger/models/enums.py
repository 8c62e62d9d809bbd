from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of leave an employee can request."""

    SICK = "Sick"
    CASUAL = "Casual"
    PAID = "Paid"
    UNPAID = "Unpaid"

    @property
    def is_ledgered(self) -> bool:
        """Whether requests of this type draw on the quarterly ledger."""
        return self is not LeaveType.UNPAID

    @property
    def ledger_key(self) -> str:
        """Column prefix of this type on the quarterly ledger (``sick``, ``casual``, ``paid``)."""
        return self.value.lower()


LEDGERED_LEAVE_TYPES: tuple[LeaveType, ...] = (LeaveType.SICK, LeaveType.CASUAL, LeaveType.PAID)


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Quarter(enum.StrEnum):
    """Fiscal quarter of an April-start financial year."""

    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"

    @property
    def number(self) -> int:
        return int(self.value[1])


class AttendanceStatus(enum.StrEnum):
    """Daily attendance mark for an employee."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"
