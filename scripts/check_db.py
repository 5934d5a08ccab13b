"""Quick check of database state."""
import sys
from datetime import date
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from habit_store.db import get_db
from habit_store.services import HabitRepository, current_streak, longest_streak

db = get_db()
repo = HabitRepository(db)
today = date.today()

print("=== Habits ===")
habits = repo.store.list_all()
print(f"Total: {len(habits)}")
for h in habits:
    done = "x" if h.is_completed else " "
    streak = current_streak(h.completed_dates, today)
    best = longest_streak(h.completed_dates)
    print(f"  [{done}] {h.id[:8]} | {(h.title or '')[:40]:<40} | streak {streak:>3} | best {best:>3}")

print("\n=== Statistics ===")
stats = repo.statistics(today)
print(f"  Streak: {stats.current_streak} (best {stats.longest_streak})")
print(f"  Weekly completion: {stats.weekly_completion_rate:.0%}")
print("  Mon..Sun: " + " ".join(f"{r:.0%}" for r in stats.weekly_daily_rates))
print(f"  Completed today: {stats.completed_today}/{stats.total_habits}, all-time: {stats.total_completed}")

print("\n=== At risk ===")
for a in repo.at_risk(today):
    print(f"  {a.habit.id[:8]} | {(a.habit.title or '')[:40]:<40} | missed {a.miss_rate:.0%}")
db.close()
