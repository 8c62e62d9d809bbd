"""Fiscal calendar helpers for an April-start financial year.

Apr-Jun is Q1, Jul-Sep Q2, Oct-Dec Q3 and Jan-Mar Q4. Q4 belongs to the
fiscal year that started the previous April, so 2026-02-10 falls in
Q4 of fiscal year 2025.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from leave_ledger.models.enums import Quarter

if TYPE_CHECKING:
    from collections.abc import Iterator

_QUARTER_BY_MONTH: dict[int, Quarter] = {
    4: Quarter.Q1,
    5: Quarter.Q1,
    6: Quarter.Q1,
    7: Quarter.Q2,
    8: Quarter.Q2,
    9: Quarter.Q2,
    10: Quarter.Q3,
    11: Quarter.Q3,
    12: Quarter.Q3,
    1: Quarter.Q4,
    2: Quarter.Q4,
    3: Quarter.Q4,
}

# First calendar month of each quarter, relative to the fiscal year start.
_QUARTER_START_MONTH: dict[Quarter, int] = {
    Quarter.Q1: 4,
    Quarter.Q2: 7,
    Quarter.Q3: 10,
    Quarter.Q4: 1,
}

_NEXT_QUARTER: dict[Quarter, Quarter] = {
    Quarter.Q1: Quarter.Q2,
    Quarter.Q2: Quarter.Q3,
    Quarter.Q3: Quarter.Q4,
    Quarter.Q4: Quarter.Q1,
}


@dataclass(frozen=True)
class FiscalQuarter:
    """A (fiscal year, quarter) accounting period."""

    fiscal_year: int
    quarter: Quarter

    def __str__(self) -> str:
        return f"{self.quarter.value} FY{self.fiscal_year}"

    @property
    def start_date(self) -> date:
        month = _QUARTER_START_MONTH[self.quarter]
        year = self.fiscal_year + 1 if self.quarter is Quarter.Q4 else self.fiscal_year
        return date(year, month, 1)

    @property
    def end_date(self) -> date:
        start = self.start_date
        end_month = start.month + 2
        return date(start.year, end_month, calendar.monthrange(start.year, end_month)[1])

    def next(self) -> FiscalQuarter:
        """Return the following quarter; Q4 rolls into Q1 of the next fiscal year."""
        if self.quarter is Quarter.Q4:
            return FiscalQuarter(self.fiscal_year + 1, Quarter.Q1)
        return FiscalQuarter(self.fiscal_year, _NEXT_QUARTER[self.quarter])


def resolve_quarter(day: date) -> FiscalQuarter:
    """Map a calendar date to its fiscal quarter."""
    quarter = _QUARTER_BY_MONTH[day.month]
    fiscal_year = day.year - 1 if quarter is Quarter.Q4 else day.year
    return FiscalQuarter(fiscal_year, quarter)


def current_quarter(today: date | None = None) -> FiscalQuarter:
    return resolve_quarter(today or date.today())


def count_days(start: date, end: date) -> int:
    """Inclusive number of calendar days between two dates, in either order."""
    span = abs((end - start).total_seconds()) / 86400
    return math.ceil(span) + 1


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` through ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
