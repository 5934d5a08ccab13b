#!/usr/bin/env python3
"""Initialize the database and optionally seed it with habits from a YAML file.

Seed file format::

    habits:
      - title: Run
        description: 5k before breakfast
        completed_dates: ["2024-01-01", "2024-01-02"]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from habit_store.config import get_log_level
from habit_store.db.database import Database
from habit_store.errors import HabitStoreError
from habit_store.models.habit import Habit
from habit_store.services.habit_repository import HabitRepository


def main():
    parser = argparse.ArgumentParser(description="Initialize the habits database")
    parser.add_argument("--seed-habits", type=str, help="YAML file with habit definitions")
    parser.add_argument("--db-path", type=str, help="Override database path")
    args = parser.parse_args()

    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")

    db_path = Path(args.db_path) if args.db_path else None
    db = Database(path=db_path)
    db.init()
    print(f"Database initialized at: {db.path}")

    if args.seed_habits:
        _seed_habits(db, Path(args.seed_habits))

    db.close()
    print("Done.")


def _seed_habits(db: Database, path: Path):
    import yaml
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    repo = HabitRepository(db)
    for h in data.get("habits", []):
        try:
            habit = Habit(
                title=h["title"],
                description=h.get("description"),
                is_completed=bool(h.get("is_completed", False)),
                completed_dates={str(d) for d in h.get("completed_dates", [])},
            )
            if h.get("id"):
                habit.id = str(h["id"])
            repo.create_habit(habit)
            print(f"  Created habit: {habit.title} ({habit.id[:8]})")
        except (KeyError, HabitStoreError) as e:
            print(f"  Skipping {h.get('title', '?')}: {e}")


if __name__ == "__main__":
    main()
