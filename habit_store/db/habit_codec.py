"""Row codec for the ``habits`` table.

Translates between :class:`Habit` and the positional column values used by
the store's statements. ``completed_dates`` travels as a single TEXT column
holding the dates joined by ``COMPLETED_DATES_SEPARATOR``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from habit_store.models.habit import Habit

COMPLETED_DATES_SEPARATOR = ","

COLUMNS = ("id", "title", "description", "is_completed", "created_at", "completed_dates")


def join_completed_dates(dates: Optional[Iterable[str]]) -> str:
    if not dates:
        return ""
    return COMPLETED_DATES_SEPARATOR.join(sorted(dates))


def split_completed_dates(raw: Optional[str]) -> set[str]:
    if not raw:
        return set()
    return {d for d in raw.split(COMPLETED_DATES_SEPARATOR) if d}


def encode(habit: Habit) -> tuple[Any, ...]:
    """Column values in ``COLUMNS`` order."""
    return (
        habit.id,
        habit.title,
        habit.description,
        1 if habit.is_completed else 0,
        habit.created_at,
        join_completed_dates(habit.completed_dates),
    )


def decode(row: Mapping[str, Any]) -> Habit:
    return Habit(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        is_completed=bool(row["is_completed"]),
        created_at=row["created_at"],
        completed_dates=split_completed_dates(row["completed_dates"]),
    )
