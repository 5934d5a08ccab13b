"""Habit repository — application-facing habit operations.

Wraps :class:`HabitStore` with the use cases the app needs: creating,
editing, completing for the day, deleting and observing habits. Streaks
are derived from ``completed_dates`` and never stored.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from habit_store.db.database import Database
from habit_store.db.habit_store import HabitStore
from habit_store.db.live_query import LiveQuery
from habit_store.models.habit import DATE_FORMAT, Habit, format_date

logger = logging.getLogger(__name__)


def _parse_dates(completed_dates: Iterable[str]) -> set[date]:
    parsed: set[date] = set()
    for raw in completed_dates:
        try:
            parsed.add(datetime.strptime(raw, DATE_FORMAT).date())
        except ValueError:
            logger.debug(f"Skipping malformed completion date {raw!r}")
    return parsed


def current_streak(completed_dates: Iterable[str], today: Optional[date] = None) -> int:
    """Consecutive completed days ending today, or yesterday if today is still open."""
    days = _parse_dates(completed_dates)
    if not days:
        return 0
    today = today or date.today()
    check = today if today in days else today - timedelta(days=1)
    streak = 0
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def longest_streak(completed_dates: Iterable[str]) -> int:
    days = sorted(_parse_dates(completed_dates))
    best = run = 0
    previous: Optional[date] = None
    for day in days:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best


class HabitRepository:
    """Facade over :class:`HabitStore` for the application layer."""

    def __init__(self, db: Database):
        self._store = HabitStore(db)

    @property
    def store(self) -> HabitStore:
        return self._store

    # -- queries ---------------------------------------------------------------

    def get_habits(self) -> LiveQuery[list[Habit]]:
        return self._store.observe_all()

    def get_habit_by_id(self, habit_id: str) -> Optional[Habit]:
        return self._store.get_by_id(habit_id)

    # -- commands --------------------------------------------------------------

    def create_habit(self, habit: Habit) -> str:
        self._store.insert(habit)
        logger.info(f"Created habit {habit.id}: {habit.title}")
        return habit.id

    def update_habit(self, habit: Habit) -> None:
        self._store.update(habit)

    def edit_habit(
        self, habit_id: str, title: Optional[str], description: Optional[str]
    ) -> Optional[Habit]:
        """Change title and description; ``None`` if the habit is gone."""
        existing = self._store.get_by_id(habit_id)
        if existing is None:
            return None
        edited = dataclasses.replace(existing, title=title, description=description)
        self._store.update(edited)
        logger.info(f"Edited habit {habit_id}")
        return edited

    def delete_habit(self, habit_id: str) -> None:
        if self._store.delete_by_id(habit_id):
            logger.info(f"Deleted habit {habit_id}")

    def complete_habit(
        self, habit_id: str, completed: bool, today: Optional[date] = None
    ) -> Optional[Habit]:
        """Mark (or unmark) the habit as done for ``today``.

        Returns the updated habit, or ``None`` when ``habit_id`` is unknown.
        """
        existing = self._store.get_by_id(habit_id)
        if existing is None:
            return None
        day = format_date(today or date.today())
        dates = set(existing.completed_dates)
        if completed:
            dates.add(day)
        else:
            dates.discard(day)
        updated = dataclasses.replace(existing, is_completed=completed, completed_dates=dates)
        self._store.update(updated)
        logger.info(f"Marked habit {habit_id} {'completed' if completed else 'not completed'} on {day}")
        return updated

    # -- insights --------------------------------------------------------------

    def statistics(self, today: Optional[date] = None):
        """One-shot :class:`HabitStatistics` over every stored habit."""
        from habit_store.services.statistics import habit_statistics
        return habit_statistics(self._store.list_all(), today)

    def at_risk(self, today: Optional[date] = None):
        from habit_store.services.statistics import at_risk_habits
        return at_risk_habits(self._store.list_all(), today)
