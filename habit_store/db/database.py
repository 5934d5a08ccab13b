"""Core database connection with ACID transaction support and change notification."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Generator, Optional

from habit_store.db.schema import SCHEMA_DDL
from habit_store.errors import StorageError

logger = logging.getLogger(__name__)

Observer = Callable[[], None]


class Database:
    """
    SQLite database wrapper with explicit ACID transaction support.

    Implements the Unit-of-Work pattern: every mutation goes through
    ``transaction()``, which commits on success and rolls back on failure.
    Engine errors surface as :class:`StorageError`.

    Writers call ``notify_changed(table)`` once their transaction has
    committed; observers registered for that table are then invoked on the
    writer's thread.
    """

    def __init__(self, path: Optional[Path | str] = None):
        from habit_store.config import get_db_path
        if path is None:
            self.path: Path = get_db_path()
        elif isinstance(path, str):
            self.path = Path(path)
        else:
            self.path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._observers: dict[str, list[Observer]] = {}
        self._observers_lock = threading.Lock()

    # -- connection lifecycle --------------------------------------------------

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                self._ensure_dir()
                try:
                    self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
                except sqlite3.Error as e:
                    raise StorageError(f"Cannot open database {self.path}: {e}") from e
                self._conn.row_factory = sqlite3.Row
                self._conn.execute("PRAGMA journal_mode = WAL")
            return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def init(self) -> None:
        """Create all tables (idempotent)."""
        with self._lock:
            conn = self.connection()
            try:
                conn.executescript(SCHEMA_DDL)
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Schema creation failed: {e}") from e

    # -- transaction helpers ---------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """ACID transaction: commits on success, rolls back on exception."""
        with self._lock:
            conn = self.connection()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(str(e)) from e
            except Exception:
                conn.rollback()
                raise

    # -- low-level query helpers -----------------------------------------------

    def fetchone(self, sql: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        with self._lock:
            try:
                cursor = self.connection().execute(sql, params)
                try:
                    row = cursor.fetchone()
                finally:
                    cursor.close()
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
        return dict(row) if row else None

    def fetchall(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self._lock:
            try:
                cursor = self.connection().execute(sql, params)
                try:
                    rows = cursor.fetchall()
                finally:
                    cursor.close()
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
        return [dict(r) for r in rows]

    # -- change notification ---------------------------------------------------

    def add_observer(self, table: str, observer: Observer) -> None:
        with self._observers_lock:
            self._observers.setdefault(table, []).append(observer)

    def remove_observer(self, table: str, observer: Observer) -> None:
        with self._observers_lock:
            observers = self._observers.get(table, [])
            if observer in observers:
                observers.remove(observer)
            if not observers:
                self._observers.pop(table, None)

    def observer_count(self, table: str) -> int:
        with self._observers_lock:
            return len(self._observers.get(table, []))

    def notify_changed(self, *tables: str) -> None:
        """Invoke every observer of ``tables``; one failing observer never stops the rest."""
        with self._observers_lock:
            pending = [obs for t in tables for obs in self._observers.get(t, [])]
        for observer in pending:
            try:
                observer()
            except Exception:
                logger.exception(f"Observer failed after change to {', '.join(tables)}")


# -- module singleton ----------------------------------------------------------

_default_db: Optional[Database] = None


def get_db(path: Optional[Path] = None) -> Database:
    """Return (and lazily initialise) the module-level Database singleton."""
    global _default_db
    if _default_db is None:
        _default_db = Database(path)
        _default_db.init()
    return _default_db


def reset_db() -> None:
    """Close and discard the singleton (useful in tests)."""
    global _default_db
    if _default_db is not None:
        _default_db.close()
        _default_db = None
