"""SQLite-backed check store."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import PersistenceError
from ..monitor.types import HealthCheck

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS health_checks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    url TEXT NOT NULL,
    status TEXT NOT NULL,
    status_code INTEGER,
    response_time INTEGER,
    timestamp DATETIME NOT NULL,
    error TEXT,
    tags TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_url_timestamp ON health_checks(url, timestamp);
CREATE INDEX IF NOT EXISTS idx_name ON health_checks(name);
"""

_INSERT = """
INSERT INTO health_checks (name, url, status, status_code, response_time, timestamp, error, tags)
VALUES (:name, :url, :status, :status_code, :response_time, :timestamp, :error, :tags)
"""


class SQLiteCheckStore:
    """
    Persists health checks into a local SQLite file.

    One connection is shared by every polling loop; writes run in worker
    threads and are serialised by a thread lock.
    """

    backend = "sqlite"

    def __init__(self, connection: sqlite3.Connection, db_path: Path):
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = connection
        self._write_lock = threading.Lock()

    @classmethod
    def open(cls, db_path: Path) -> "SQLiteCheckStore":
        """
        Open (or create) the database at ``db_path`` and ensure the schema exists.

        Raises:
            PersistenceError: If the directory or database cannot be prepared
        """
        if str(db_path) != ":memory:":
            try:
                db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise PersistenceError(f"Cannot create database directory for {db_path}", backend=cls.backend) from exc

        connection = None
        try:
            connection = sqlite3.connect(str(db_path), check_same_thread=False)
            connection.row_factory = sqlite3.Row
            connection.execute("SELECT 1")
            connection.executescript(_SCHEMA)
            connection.commit()
        except sqlite3.Error as exc:
            if connection is not None:
                connection.close()
            raise PersistenceError(f"Cannot open SQLite database {db_path}: {exc}", backend=cls.backend) from exc

        logger.info("Opened SQLite check store at %s", db_path)
        return cls(connection, db_path)

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise PersistenceError("SQLite check store is closed", backend=self.backend)
        return self._connection

    def _insert(self, record: Dict[str, Any]) -> None:
        with self._write_lock:
            connection = self._require_connection()
            try:
                connection.execute(_INSERT, record)
                connection.commit()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to save check for {record['url']}: {exc}", backend=self.backend) from exc

    async def save_check(self, check: HealthCheck) -> None:
        await asyncio.to_thread(self._insert, check.to_record())

    def _select_recent(self, url: str, limit: int) -> List[Dict[str, Any]]:
        with self._write_lock:
            connection = self._require_connection()
            try:
                rows = connection.execute(
                    "SELECT name, url, status, status_code, response_time, timestamp, error, tags "
                    "FROM health_checks WHERE url = ? ORDER BY id DESC LIMIT ?",
                    (url, limit),
                ).fetchall()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to read checks for {url}: {exc}", backend=self.backend) from exc
        return [dict(row) for row in rows]

    async def recent_checks(self, url: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Return the newest persisted rows for ``url``, newest first."""
        return await asyncio.to_thread(self._select_recent, url, limit)

    def _close(self) -> None:
        with self._write_lock:
            if self._connection is None:
                return
            try:
                self._connection.close()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to close SQLite database {self.db_path}", backend=self.backend) from exc
            finally:
                self._connection = None

    async def close(self) -> None:
        await asyncio.to_thread(self._close)
