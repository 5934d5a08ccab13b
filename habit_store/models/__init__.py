"""Domain models for the habit store."""

from habit_store.models.habit import DATE_FORMAT, Habit, format_date, now_millis

__all__ = ["Habit", "DATE_FORMAT", "format_date", "now_millis"]
