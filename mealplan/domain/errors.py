"""Planner error kinds shared by the store, the coordinator and the API layer."""
from typing import Iterable, Optional


class PlannerError(Exception):
    """Base class for all meal plan engine errors."""


class NotFound(PlannerError):
    """Requested week (or other record) has no stored plan. Recoverable."""


class InvalidReference(PlannerError):
    """Day index outside 0-6, malformed date string or unknown category."""


class StorageError(PlannerError):
    """The persistence boundary failed a read or a write."""


class PartialMoveError(StorageError):
    """A swap spanning two weeks persisted only one side.

    ``committed`` lists the week keys that were written, ``pending`` the ones
    that still hold the pre-move value in the store.
    """

    def __init__(self, message: str, committed: Iterable[str] = (), pending: Iterable[str] = (),
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.committed = list(committed)
        self.pending = list(pending)
        self.cause = cause


__all__ = ['PlannerError', 'NotFound', 'InvalidReference', 'StorageError', 'PartialMoveError']
