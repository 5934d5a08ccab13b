"""Live queries — re-run a query every time an observed table changes.

A :class:`LiveQuery` keeps the newest unread snapshot in a single slot. The
first snapshot is taken when the subscription is created; every committed
write to the observed table replaces whatever is still unread, so a slow
consumer only ever sees the latest state. Consumers pull with ``get()`` or
iterate, and stop with ``cancel()``.

Usage::

    with store.observe_all() as habits:
        for snapshot in habits:
            render(snapshot)
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Generic, Iterator, Optional, TypeVar

from habit_store.db.database import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubscriptionClosed(Exception):
    """Raised by ``LiveQuery.get()`` once the subscription has been cancelled."""


class _Empty:
    pass


_EMPTY = _Empty()


class LiveQuery(Generic[T]):
    """A cancellable stream of full query snapshots, newest wins."""

    def __init__(self, db: Database, table: str, query: Callable[[], T]):
        self._db = db
        self._table = table
        self._query = query
        self._cond = threading.Condition()
        self._refresh_lock = threading.Lock()
        self._pending: object = _EMPTY
        self._error: Optional[Exception] = None
        self._closed = False
        self._latest: Optional[T] = None

        # Register before the first read so a concurrent write is never missed.
        self._db.add_observer(self._table, self._refresh)
        try:
            self._refresh_or_raise()
        except Exception:
            self.cancel()
            raise

    # -- producer side ---------------------------------------------------------

    def _refresh_or_raise(self) -> None:
        # Serialised so the slot always ends up holding the newest read.
        with self._refresh_lock:
            snapshot = self._query()
            with self._cond:
                if self._closed:
                    return
                self._latest = snapshot
                self._pending = snapshot
                self._cond.notify_all()

    def _refresh(self) -> None:
        try:
            self._refresh_or_raise()
        except Exception as e:
            with self._cond:
                if self._closed:
                    return
                # Error and closed state become visible together.
                self._error = e
                self._closed = True
                self._cond.notify_all()
            logger.error(f"Live query on {self._table} failed; closing subscription: {e}")
            self._db.remove_observer(self._table, self._refresh)

    # -- consumer side ---------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def latest(self) -> Optional[T]:
        """The most recent snapshot produced, consumed or not."""
        return self._latest

    def get(self, timeout: Optional[float] = None) -> T:
        """Next snapshot, blocking up to ``timeout`` seconds.

        An unread snapshot is always handed out first. After that, a failed
        refresh raises the query's own exception (once), and a cancelled or
        failed subscription raises :class:`SubscriptionClosed`. Raises
        ``queue.Empty`` on timeout.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending is not _EMPTY or self._closed, timeout
            )
            if not ready:
                raise queue.Empty
            if self._pending is not _EMPTY:
                snapshot = self._pending
                self._pending = _EMPTY
                return snapshot  # type: ignore[return-value]
            if self._error is not None:
                error, self._error = self._error, None
                raise error
            raise SubscriptionClosed(f"Subscription on {self._table} is closed")

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    # -- cancellation ----------------------------------------------------------

    def cancel(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        self._db.remove_observer(self._table, self._refresh)
        logger.debug(f"Live query on {self._table} cancelled")

    def __enter__(self) -> "LiveQuery[T]":
        return self

    def __exit__(self, *exc) -> None:
        self.cancel()
