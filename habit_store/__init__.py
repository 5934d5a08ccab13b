"""Local SQLite persistence for habits, with live-updating listings."""

from habit_store.db import Database, HabitStore, LiveQuery, SubscriptionClosed
from habit_store.errors import HabitStoreError, NotFoundError, StorageError
from habit_store.models import Habit

__version__ = "0.1.0"

__all__ = [
    "Database", "HabitStore", "LiveQuery", "SubscriptionClosed",
    "Habit",
    "HabitStoreError", "NotFoundError", "StorageError",
]
