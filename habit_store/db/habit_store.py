"""Data-access object for the ``habits`` table — CRUD plus a live listing."""

from __future__ import annotations

import logging
from typing import Optional

from habit_store.db import habit_codec
from habit_store.db.database import Database
from habit_store.db.live_query import LiveQuery
from habit_store.db.schema import HABITS_TABLE
from habit_store.errors import NotFoundError
from habit_store.models.habit import Habit

logger = logging.getLogger(__name__)

_INSERT_OR_REPLACE = (
    "INSERT OR REPLACE INTO habits "
    "(id, title, description, is_completed, created_at, completed_dates) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)

_UPDATE = (
    "UPDATE OR ABORT habits SET "
    "id = ?, title = ?, description = ?, is_completed = ?, created_at = ?, completed_dates = ? "
    "WHERE id = ?"
)


class HabitStore:
    """Single-Responsibility store for habit persistence.

    Each write runs in its own transaction and, once committed, notifies the
    observers of the ``habits`` table. Reads always go to SQLite.
    """

    def __init__(self, db: Database):
        self._db = db

    # -- Create ----------------------------------------------------------------

    def insert(self, habit: Habit) -> Habit:
        """Insert ``habit``, fully replacing any row with the same id."""
        with self._db.transaction() as conn:
            conn.execute(_INSERT_OR_REPLACE, habit_codec.encode(habit))
        logger.debug(f"Upserted habit {habit.id}")
        self._db.notify_changed(HABITS_TABLE)
        return habit

    # -- Read ------------------------------------------------------------------

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        row = self._db.fetchone("SELECT * FROM habits WHERE id = ? LIMIT 1", (habit_id,))
        return habit_codec.decode(row) if row else None

    def list_all(self) -> list[Habit]:
        rows = self._db.fetchall("SELECT * FROM habits ORDER BY created_at DESC")
        return [habit_codec.decode(r) for r in rows]

    def observe_all(self) -> LiveQuery[list[Habit]]:
        """Subscribe to the habit list, newest first.

        The returned :class:`LiveQuery` already holds the current list and
        receives a fresh one after every committed write. Call ``cancel()``
        (or leave its ``with`` block) to unsubscribe.
        """
        return LiveQuery(self._db, HABITS_TABLE, self.list_all)

    # -- Update ----------------------------------------------------------------

    def update(self, habit: Habit) -> Habit:
        """Overwrite every column of the row with ``habit.id``.

        Raises :class:`NotFoundError` when no such row exists.
        """
        with self._db.transaction() as conn:
            cursor = conn.execute(_UPDATE, habit_codec.encode(habit) + (habit.id,))
            if cursor.rowcount == 0:
                logger.warning(f"Update rejected, no habit with id {habit.id}")
                raise NotFoundError(habit.id)
        logger.debug(f"Updated habit {habit.id}")
        self._db.notify_changed(HABITS_TABLE)
        return habit

    # -- Delete ----------------------------------------------------------------

    def delete_by_id(self, habit_id: str) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM habits WHERE id = ?", (habit_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(f"Deleted habit {habit_id}")
            self._db.notify_changed(HABITS_TABLE)
        return deleted
