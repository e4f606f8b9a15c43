"""Calendar helpers for week and month views.

All weeks are Monday-first (index 0 = Monday .. 6 = Sunday) regardless of the
process locale. Dates travel through the engine as canonical ``YYYY-MM-DD``
keys, which sort lexicographically in calendar order.
"""
from __future__ import annotations
import calendar
import re
from datetime import date, datetime, timedelta
from typing import List, Union

from mealplan.domain.errors import InvalidReference
from mealplan.utilities.constants import DATE_FORMAT, DAYS_IN_WEEK, MONTHS_SHORT_PL

__all__ = [
    "GridCell", "monday_of", "add_days", "canonical_key", "parse_key",
    "month_grid", "week_dates", "week_label", "shift_month", "format_date_pl",
]

KEY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

DateLike = Union[date, datetime, str]


class GridCell:
    """One cell of the month calendar grid."""

    def __init__(self, day: date, in_current_month: bool):
        self.date = day
        self.in_current_month = in_current_month

    @property
    def key(self) -> str:
        return canonical_key(self.date)

    def to_dict(self):
        return {"date": self.key, "inCurrentMonth": self.in_current_month}

    def __eq__(self, other):
        if not isinstance(other, GridCell):
            return NotImplemented
        return self.date == other.date and self.in_current_month == other.in_current_month

    def __repr__(self) -> str:
        flag = "" if self.in_current_month else " (pad)"
        return f"GridCell({self.key}{flag})"


def parse_key(value: str) -> date:
    """Parse a canonical ``YYYY-MM-DD`` key; anything else is an InvalidReference."""
    if not isinstance(value, str) or not KEY_PATTERN.match(value):
        raise InvalidReference(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidReference(f"Invalid calendar date: {value!r}") from e


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_key(value)


def monday_of(value: DateLike) -> date:
    """Monday of the week containing ``value``."""
    d = _as_date(value)
    return d - timedelta(days=d.weekday())


def add_days(value: DateLike, n: int) -> date:
    return _as_date(value) + timedelta(days=n)


def canonical_key(value: DateLike) -> str:
    d = _as_date(value)
    # strftime pads years < 1000 inconsistently across platforms
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def week_dates(monday: DateLike) -> List[date]:
    start = monday_of(monday)
    return [start + timedelta(days=i) for i in range(DAYS_IN_WEEK)]


def month_grid(year: int, month: int) -> List[GridCell]:
    """Monday-first grid for ``month`` padded with neighbour-month days.

    The first cell is always a Monday and the length is a multiple of 7.
    """
    if not 1 <= month <= 12:
        raise InvalidReference(f"Month out of range: {month}")
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    start = monday_of(first)
    end = last + timedelta(days=6 - last.weekday())
    cells: List[GridCell] = []
    current = start
    while current <= end:
        cells.append(GridCell(current, current.month == month and current.year == year))
        current += timedelta(days=1)
    return cells


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) moved by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def format_date_pl(value: DateLike) -> str:
    """Short Polish day label, e.g. ``5 sty``."""
    d = _as_date(value)
    return f"{d.day} {MONTHS_SHORT_PL[d.month - 1]}"


def week_label(monday: DateLike) -> str:
    start = monday_of(monday)
    return f"{format_date_pl(start)} — {format_date_pl(start + timedelta(days=6))}"
