"""Exception hierarchy for the habit persistence layer."""

from __future__ import annotations


class HabitStoreError(Exception):
    """Base class for every error raised by ``habit_store``."""


class StorageError(HabitStoreError):
    """The SQLite engine failed (I/O, constraint, locked database...).

    The original ``sqlite3`` exception is always chained as ``__cause__``.
    Writes are never retried.
    """


class NotFoundError(HabitStoreError):
    """An update matched no row."""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id
