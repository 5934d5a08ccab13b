"""Habit domain model — a trackable daily routine."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

DATE_FORMAT = "%Y-%m-%d"


def now_millis() -> int:
    return int(time.time() * 1000)


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


@dataclass
class Habit:
    """A habit with its completion history.

    ``completed_dates`` holds one ``YYYY-MM-DD`` string per day the habit
    was marked done.
    """

    title: Optional[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    description: Optional[str] = None
    is_completed: bool = False
    created_at: int = field(default_factory=now_millis)
    completed_dates: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "is_completed": self.is_completed,
            "created_at": self.created_at,
            "completed_dates": sorted(self.completed_dates),
        }
