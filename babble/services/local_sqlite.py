"""
Per-thread SQLite connections that close themselves when idle.

Every worker thread gets its own connection, opened lazily on first use.
A background sweeper closes connections that have not been used for
``idle_timeout`` seconds; the next access transparently reopens them.
"""
from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Generator, List, Optional

logger = logging.getLogger(__name__)


class LocalConnection:
    """One thread's connection plus its last-access bookkeeping."""

    def __init__(self, connect: Callable[[], sqlite3.Connection]):
        self._connect = connect
        self.owner = threading.current_thread()
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._in_use = 0
        self._last_access = time.monotonic()

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._conn is not None

    @contextlib.contextmanager
    def lease(self) -> Generator[sqlite3.Connection, None, None]:
        with self._lock:
            if self._conn is None:
                self._conn = self._connect()
            self._in_use += 1
            conn = self._conn
        try:
            yield conn
        finally:
            with self._lock:
                self._in_use -= 1
                self._last_access = time.monotonic()

    def close_if_idle(self, idle_timeout: float) -> bool:
        with self._lock:
            if self._conn is None or self._in_use > 0:
                return False
            if time.monotonic() - self._last_access <= idle_timeout:
                return False
            self._conn.close()
            self._conn = None
            return True

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


class ThreadLocalSqlite:
    """
    Thread-local SQLite connection cache with idle eviction.

    Usage:
        db = ThreadLocalSqlite("var/chains.sqlite3", idle_timeout=600)
        with db.connection() as conn:
            conn.execute("SELECT 1")
        db.close()
    """

    def __init__(
        self,
        path: str | Path,
        idle_timeout: float = 600.0,
        busy_timeout: float = 30.0,
    ):
        """
        Args:
            path: SQLite database file
            idle_timeout: Seconds of inactivity before a connection is closed
            busy_timeout: Seconds a connection waits on a locked database
        """
        if not str(path).strip():
            raise ValueError("path can't be empty or whitespace")
        if idle_timeout <= 0:
            raise ValueError(f"idle_timeout must be positive, got {idle_timeout}")

        self.path = str(path)
        self.idle_timeout = idle_timeout
        self.busy_timeout = busy_timeout

        self._local = threading.local()
        self._handles: List[LocalConnection] = []
        self._handles_lock = threading.Lock()
        self._closed = threading.Event()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="sqlite-idle-sweeper", daemon=True
        )
        self._sweeper.start()

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.path,
            timeout=self.busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        logger.debug(f"[SQLite] Opened connection to {self.path} on {threading.current_thread().name}")
        return conn

    def _handle(self) -> LocalConnection:
        if self._closed.is_set():
            raise RuntimeError("ThreadLocalSqlite is closed")
        handle = getattr(self._local, "handle", None)
        if handle is None:
            handle = LocalConnection(self._open)
            self._local.handle = handle
            with self._handles_lock:
                self._handles.append(handle)
        return handle

    def connection(self):
        """Context manager yielding this thread's connection."""
        return self._handle().lease()

    @contextlib.contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Run the block inside a single write transaction, rolled back on any error."""
        with self.connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def sweep(self) -> int:
        """Close every idle connection; returns how many were closed."""
        with self._handles_lock:
            handles = list(self._handles)
        closed = sum(1 for h in handles if h.close_if_idle(self.idle_timeout))
        with self._handles_lock:
            # Threads that have exited will never reuse their handle.
            self._handles = [h for h in self._handles if h.owner.is_alive() or h.is_open]
        if closed:
            logger.debug(f"[SQLite] Closed {closed} idle connection(s)")
        return closed

    def _sweep_loop(self) -> None:
        interval = self.idle_timeout / 2
        while not self._closed.wait(interval):
            self.sweep()

    def close(self) -> None:
        self._closed.set()
        with self._handles_lock:
            handles = list(self._handles)
            self._handles.clear()
        for handle in handles:
            handle.close()
        if self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=self.busy_timeout)
