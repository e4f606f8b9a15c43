"""Slot descriptors used by drag & drop moves.

A slot is addressed either by a day index inside a week (the current week when
``week_start`` is omitted) or by an absolute ``YYYY-MM-DD`` date. The
coordinator normalises both forms to a (plan, index) pair.
"""
from typing import Optional


class DaySlot:
    def __init__(self, index: int, week_start: Optional[str] = None):
        self.index = index
        self.week_start = week_start

    def __repr__(self) -> str:
        where = self.week_start or "current"
        return f"DaySlot({where}[{self.index}])"


class DateSlot:
    def __init__(self, date: str):
        self.date = date

    def __repr__(self) -> str:
        return f"DateSlot({self.date})"


__all__ = ['DaySlot', 'DateSlot']
