"""Database layer — SQLite with ACID transactions, row codec and live queries."""

from habit_store.db.database import Database, get_db, reset_db
from habit_store.db.habit_store import HabitStore
from habit_store.db.live_query import LiveQuery, SubscriptionClosed
from habit_store.db.schema import HABITS_TABLE, SCHEMA_DDL

__all__ = [
    "Database", "get_db", "reset_db",
    "HabitStore",
    "LiveQuery", "SubscriptionClosed",
    "HABITS_TABLE", "SCHEMA_DDL",
]
