"""WeekPlan domain entity: seven day slots starting on a Monday (the unit of persistence)."""
from typing import List, Optional
from uuid import uuid4

from mealplan.domain.errors import InvalidReference
from mealplan.logic.dates.weeks import add_days, canonical_key, monday_of, parse_key
from mealplan.utilities.constants import DAYS_IN_WEEK, DAYS_PL


class DayAssignment:
    """One day of a week plan. Only ``recipe_id`` is ever changed after creation."""

    __slots__ = ("date", "day_of_week", "recipe_id")

    def __init__(self, date: str, day_of_week: str, recipe_id: Optional[str] = None):
        self.date = date
        self.day_of_week = day_of_week
        self.recipe_id = recipe_id

    def __eq__(self, other):
        if not isinstance(other, DayAssignment):
            return NotImplemented
        return (self.date, self.day_of_week, self.recipe_id) == (other.date, other.day_of_week, other.recipe_id)

    def __repr__(self) -> str:
        return f"DayAssignment({self.date}, {self.day_of_week}, {self.recipe_id!r})"

    def to_dict(self):
        return {"date": self.date, "dayOfWeek": self.day_of_week, "recipeId": self.recipe_id}

    @staticmethod
    def from_dict(data):
        return DayAssignment(data["date"], data.get("dayOfWeek", ""), data.get("recipeId") or None)


def check_index(index) -> int:
    """Validate a day index (0 = Monday .. 6 = Sunday)."""
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < DAYS_IN_WEEK:
        raise InvalidReference(f"Day index must be an integer in 0..6, got {index!r}")
    return index


class WeekPlan:
    def __init__(self, id: str, week_start: str, days: List[DayAssignment]):
        if len(days) != DAYS_IN_WEEK:
            raise InvalidReference(f"A week plan needs exactly {DAYS_IN_WEEK} days, got {len(days)}")
        self.id = id
        self.week_start = week_start
        self.days = days

    @classmethod
    def create_empty(cls, monday) -> "WeekPlan":
        """New plan for the week of ``monday`` with every day unassigned."""
        start = monday_of(monday)
        days = [DayAssignment(canonical_key(add_days(start, i)), DAYS_PL[i]) for i in range(DAYS_IN_WEEK)]
        return cls(uuid4().hex, canonical_key(start), days)

    @property
    def monday(self):
        return parse_key(self.week_start)

    def recipe_ids(self) -> List[Optional[str]]:
        return [day.recipe_id for day in self.days]

    def index_of(self, date_str: str) -> Optional[int]:
        for i, day in enumerate(self.days):
            if day.date == date_str:
                return i
        return None

    def set_recipe(self, index: int, recipe_id: Optional[str]) -> bool:
        """Assign ``recipe_id`` to ``days[index]``; returns True if the slot changed."""
        day = self.days[check_index(index)]
        if day.recipe_id == recipe_id:
            return False
        day.recipe_id = recipe_id
        return True

    def has_assignments(self) -> bool:
        return any(day.recipe_id for day in self.days)

    def copy(self) -> "WeekPlan":
        return WeekPlan.from_dict(self.to_dict())

    def __eq__(self, other):
        if not isinstance(other, WeekPlan):
            return NotImplemented
        return self.id == other.id and self.week_start == other.week_start and self.days == other.days

    def __repr__(self) -> str:
        return f"WeekPlan({self.week_start}, {self.recipe_ids()})"

    def to_dict(self):
        return {"id": self.id, "weekStart": self.week_start, "days": [d.to_dict() for d in self.days]}

    def check_dates(self) -> "WeekPlan":
        """Raise InvalidReference unless weekStart is a canonical Monday and days[i] is weekStart + i."""
        start = parse_key(self.week_start)
        if monday_of(start) != start:
            raise InvalidReference(f"Week start {self.week_start} is not a Monday")
        for i, day in enumerate(self.days):
            expected = canonical_key(add_days(start, i))
            if day.date != expected:
                raise InvalidReference(f"Day {i} of week {self.week_start} is {day.date!r}, expected {expected}")
        return self

    @staticmethod
    def from_dict(data):
        days = [DayAssignment.from_dict(d) for d in data.get("days", [])]
        return WeekPlan(data["id"], data["weekStart"], days).check_dates()
