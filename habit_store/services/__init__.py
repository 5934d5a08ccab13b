"""Application-facing services built on the habit store."""

from habit_store.services.habit_repository import (
    HabitRepository,
    current_streak,
    longest_streak,
)
from habit_store.services.statistics import (
    HabitRiskAssessment,
    HabitStatistics,
    assess_habit_risk,
    at_risk_habits,
    habit_statistics,
)

__all__ = [
    "HabitRepository", "current_streak", "longest_streak",
    "HabitStatistics", "HabitRiskAssessment",
    "habit_statistics", "assess_habit_risk", "at_risk_habits",
]
