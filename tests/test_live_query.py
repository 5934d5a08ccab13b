"""Tests for live habit listings (``HabitStore.observe_all``)."""

from __future__ import annotations

import queue
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from habit_store.db.database import Database
from habit_store.db.habit_store import HabitStore
from habit_store.db.live_query import LiveQuery, SubscriptionClosed
from habit_store.errors import StorageError
from habit_store.models.habit import Habit


def _make_db() -> Database:
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    db = Database(path=Path(tmp.name))
    db.init()
    return db


class TestObserveAll(unittest.TestCase):
    def setUp(self):
        self.db = _make_db()
        self.store = HabitStore(self.db)

    def tearDown(self):
        self.db.close()

    def test_initial_snapshot(self):
        self.store.insert(Habit(id="a", title="Run", created_at=100))
        with self.store.observe_all() as live:
            snapshot = live.get(timeout=1)
        self.assertEqual([h.id for h in snapshot], ["a"])

    def test_empty_table_emits_empty_list(self):
        with self.store.observe_all() as live:
            self.assertEqual(live.get(timeout=1), [])

    def test_insert_emits_new_snapshot(self):
        with self.store.observe_all() as live:
            self.assertEqual(live.get(timeout=1), [])
            self.store.insert(Habit(id="a", title="Run", completed_dates={"2024-01-01"}))
            snapshot = live.get(timeout=1)
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(snapshot[0].completed_dates, {"2024-01-01"})

    def test_every_mutation_emits_sorted_list(self):
        self.store.insert(Habit(id="mid", title="m", created_at=200))
        with self.store.observe_all() as live:
            live.get(timeout=1)
            self.store.insert(Habit(id="new", title="n", created_at=300))
            self.assertEqual([h.id for h in live.get(timeout=1)], ["new", "mid"])

            self.store.insert(Habit(id="old", title="o", created_at=100))
            self.assertEqual([h.id for h in live.get(timeout=1)], ["new", "mid", "old"])

            self.store.update(Habit(id="mid", title="renamed", created_at=200))
            snapshot = live.get(timeout=1)
            self.assertEqual([h.id for h in snapshot], ["new", "mid", "old"])
            self.assertEqual(snapshot[1].title, "renamed")

            self.store.delete_by_id("new")
            self.assertEqual([h.id for h in live.get(timeout=1)], ["mid", "old"])

    def test_noop_delete_does_not_emit(self):
        with self.store.observe_all() as live:
            live.get(timeout=1)
            self.store.delete_by_id("missing")
            with self.assertRaises(queue.Empty):
                live.get(timeout=0.05)

    def test_latest(self):
        with self.store.observe_all() as live:
            self.store.insert(Habit(id="a", title="Run"))
            self.assertEqual([h.id for h in live.latest()], ["a"])

    def test_cancel_stops_emissions_and_releases_observer(self):
        live = self.store.observe_all()
        self.assertEqual(self.db.observer_count("habits"), 1)
        live.get(timeout=1)
        live.cancel()
        self.assertTrue(live.closed)
        self.assertEqual(self.db.observer_count("habits"), 0)
        self.store.insert(Habit(id="a", title="Run"))
        with self.assertRaises(SubscriptionClosed):
            live.get(timeout=1)

    def test_cancel_is_idempotent(self):
        live = self.store.observe_all()
        other = self.store.observe_all()
        live.cancel()
        live.cancel()
        self.assertEqual(self.db.observer_count("habits"), 1)
        other.cancel()
        self.assertEqual(self.db.observer_count("habits"), 0)

    def test_unread_snapshot_survives_cancel(self):
        live = self.store.observe_all()
        self.store.insert(Habit(id="a", title="Run"))
        live.cancel()
        snapshots = list(live)
        self.assertEqual([[h.id for h in s] for s in snapshots], [["a"]])

    def test_slow_reader_only_sees_newest_snapshot(self):
        with self.store.observe_all() as live:
            for i in range(200):
                self.store.insert(Habit(id=f"h{i}", title="x", created_at=i))
            newest = live.get(timeout=1)
            self.assertEqual(len(newest), 200)
            self.assertEqual(newest[0].id, "h199")
            with self.assertRaises(queue.Empty):
                live.get(timeout=0.05)

    def test_iteration_ends_on_cancel_from_another_thread(self):
        live = self.store.observe_all()
        received: list[list[Habit]] = []

        def consume():
            for snapshot in live:
                received.append(snapshot)
                if len(snapshot) == 1:
                    live.cancel()

        worker = threading.Thread(target=consume)
        worker.start()
        self.store.insert(Habit(id="a", title="Run"))
        worker.join(timeout=2)
        self.assertFalse(worker.is_alive())
        self.assertEqual([h.id for h in received[-1]], ["a"])

    def test_independent_subscribers(self):
        first = self.store.observe_all()
        second = self.store.observe_all()
        self.store.insert(Habit(id="a", title="Run"))
        first.cancel()
        self.store.insert(Habit(id="b", title="Read"))
        self.assertEqual([len(s) for s in first], [1])
        self.assertEqual(len(second.get(timeout=1)), 2)
        second.cancel()


class TestLiveQueryFailures(unittest.TestCase):
    def setUp(self):
        self.db = _make_db()

    def tearDown(self):
        self.db.close()

    def test_failed_refresh_terminates_subscription(self):
        state = {"fail": False}

        def query():
            if state["fail"]:
                raise StorageError("database unavailable")
            return ["ok"]

        live = LiveQuery(self.db, "habits", query)
        self.assertEqual(live.get(timeout=1), ["ok"])
        state["fail"] = True
        self.db.notify_changed("habits")
        with self.assertRaises(StorageError):
            live.get(timeout=1)
        with self.assertRaises(SubscriptionClosed):
            live.get(timeout=1)
        self.assertTrue(live.closed)
        self.assertEqual(self.db.observer_count("habits"), 0)

    def test_error_visible_as_soon_as_subscription_closes(self):
        state = {"fail": False}

        def query():
            if state["fail"]:
                raise StorageError("database unavailable")
            return ["ok"]

        live = LiveQuery(self.db, "habits", query)
        live.get(timeout=1)
        seen: list[str] = []
        real_remove = self.db.remove_observer

        def remove_and_read(table, observer):
            # A consumer polling while the observer is being released
            try:
                live.get(timeout=0)
            except Exception as e:
                seen.append(type(e).__name__)
            real_remove(table, observer)

        state["fail"] = True
        with patch.object(self.db, "remove_observer", side_effect=remove_and_read):
            self.db.notify_changed("habits")
        try:
            live.get(timeout=0)
        except Exception as e:
            seen.append(type(e).__name__)
        self.assertEqual(seen, ["StorageError", "SubscriptionClosed"])
        self.assertEqual(self.db.observer_count("habits"), 0)

    def test_unread_snapshot_delivered_before_error(self):
        state = {"fail": False}

        def query():
            if state["fail"]:
                raise StorageError("database unavailable")
            return ["ok"]

        live = LiveQuery(self.db, "habits", query)
        state["fail"] = True
        self.db.notify_changed("habits")
        self.assertEqual(live.get(timeout=1), ["ok"])
        with self.assertRaises(StorageError):
            live.get(timeout=1)

    def test_failed_initial_query_raises_and_releases(self):
        def query():
            raise StorageError("database unavailable")

        with self.assertRaises(StorageError):
            LiveQuery(self.db, "habits", query)
        self.assertEqual(self.db.observer_count("habits"), 0)


if __name__ == "__main__":
    unittest.main()
