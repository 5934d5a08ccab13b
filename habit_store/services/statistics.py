"""Habit statistics and at-risk detection.

Pure date maths over a list of habits; nothing here touches the database.
``today`` is injectable everywhere so results are deterministic in tests.

At-risk detection is a sliding same-weekday window: for each habit, look at
the same weekday over the last four weeks (today excluded), skip days
before the habit existed, and flag the habit when it was missed on at least
half of them. With fewer than two usable days no judgement is made.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from habit_store.models.habit import DATE_FORMAT, Habit, format_date
from habit_store.services.habit_repository import current_streak, longest_streak

logger = logging.getLogger(__name__)

WEEKLY_WINDOW_DAYS = 7
RISK_WINDOW_WEEKS = 4
RISK_MIN_DATA_POINTS = 2
RISK_THRESHOLD = 0.5


@dataclass
class HabitStatistics:
    """Aggregated view over every habit."""
    current_streak: int = 0
    longest_streak: int = 0
    weekly_completion_rate: float = 0.0
    # Monday (index 0) to Sunday (index 6) of the current week
    weekly_daily_rates: list[float] = field(default_factory=lambda: [0.0] * 7)
    total_habits: int = 0
    completed_today: int = 0
    total_completed: int = 0


@dataclass
class HabitRiskAssessment:
    habit: Habit
    miss_rate: float
    is_at_risk: bool


def created_date(habit: Habit) -> date:
    """Calendar day (UTC) on which ``habit`` was created."""
    return datetime.fromtimestamp(habit.created_at / 1000, tz=timezone.utc).date()


def _completed_days(habit: Habit) -> set[date]:
    days: set[date] = set()
    for raw in habit.completed_dates:
        try:
            days.add(datetime.strptime(raw, DATE_FORMAT).date())
        except ValueError:
            logger.debug(f"Skipping malformed completion date {raw!r} on habit {habit.id}")
    return days


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def weekly_completion_rate(habits: list[Habit], today: date) -> float:
    """Completions over possible completions in the window ending today.

    Each habit's window starts at the later of its creation day and
    ``today - 7 days``, so a habit created today can only be completed once.
    """
    if not habits:
        return 0.0
    window_start = today - timedelta(days=WEEKLY_WINDOW_DAYS)
    possible = 0
    actual = 0
    for habit in habits:
        start = max(created_date(habit), window_start)
        possible += max((today - start).days + 1, 1)
        actual += sum(1 for d in _completed_days(habit) if start <= d <= today)
    if possible == 0:
        return 0.0
    return min(max(actual / possible, 0.0), 1.0)


def weekly_daily_rates(habits: list[Habit], today: date) -> list[float]:
    """Per-day completion rate for Monday to Sunday of the week containing ``today``.

    Days after ``today`` are 0.0; habits not yet created on a day are left
    out of that day's denominator.
    """
    if not habits:
        return [0.0] * 7
    week_start = today - timedelta(days=today.weekday())
    rates: list[float] = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        if day > today:
            rates.append(0.0)
            continue
        eligible = [h for h in habits if created_date(h) <= day]
        if not eligible:
            rates.append(0.0)
            continue
        key = format_date(day)
        done = sum(1 for h in eligible if key in h.completed_dates)
        rates.append(min(done / len(eligible), 1.0))
    return rates


def habit_statistics(habits: list[Habit], today: Optional[date] = None) -> HabitStatistics:
    """Streaks (over all habits' dates combined), weekly rates and totals."""
    if not habits:
        return HabitStatistics()
    today = today or date.today()
    all_dates = {d for h in habits for d in h.completed_dates}
    return HabitStatistics(
        current_streak=current_streak(all_dates, today),
        longest_streak=longest_streak(all_dates),
        weekly_completion_rate=weekly_completion_rate(habits, today),
        weekly_daily_rates=weekly_daily_rates(habits, today),
        total_habits=len(habits),
        completed_today=sum(1 for h in habits if h.is_completed),
        total_completed=sum(len(h.completed_dates) for h in habits),
    )


# ---------------------------------------------------------------------------
# At-risk detection
# ---------------------------------------------------------------------------

def assess_habit_risk(habit: Habit, today: Optional[date] = None) -> HabitRiskAssessment:
    today = today or date.today()
    created = created_date(habit)
    window = [
        today - timedelta(weeks=weeks_ago)
        for weeks_ago in range(1, RISK_WINDOW_WEEKS + 1)
    ]
    window = [d for d in window if d >= created]
    if len(window) < RISK_MIN_DATA_POINTS:
        return HabitRiskAssessment(habit=habit, miss_rate=0.0, is_at_risk=False)

    missed = sum(1 for d in window if format_date(d) not in habit.completed_dates)
    miss_rate = missed / len(window)
    return HabitRiskAssessment(
        habit=habit, miss_rate=miss_rate, is_at_risk=miss_rate >= RISK_THRESHOLD
    )


def at_risk_habits(habits: list[Habit], today: Optional[date] = None) -> list[HabitRiskAssessment]:
    """Assessments for the habits that are at risk, in input order."""
    today = today or date.today()
    assessments = [assess_habit_risk(h, today) for h in habits]
    return [a for a in assessments if a.is_at_risk]
