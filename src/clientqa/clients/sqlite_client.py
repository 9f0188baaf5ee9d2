"""
SQLite client for the access store.

This module wraps a single `sqlite3` connection behind async methods. Calls
run in a worker thread and are serialized by a lock, so one connection
(including an in-memory database) can be shared by the whole application.
"""

import asyncio
import sqlite3
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import structlog

from clientqa.config.settings import DatabaseSettings

logger = structlog.get_logger(__name__)


class SQLiteClient:
    """
    Async facade over a shared SQLite connection.

    This client handles:
    - Lazy connection creation
    - Row-to-dict conversion
    - Retry logic for "database is locked" errors
    """

    def __init__(self, settings: DatabaseSettings):
        """
        Initialize the SQLite client.

        Args:
            settings: Database configuration settings
        """
        self.settings = settings
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

        logger.info("Initializing SQLite client", path=settings.path)

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the shared connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self.settings.path, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
            logger.info("Connected to SQLite database", path=self.settings.path)
        return self._connection

    def _query(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        with self._lock:
            cursor = self._get_connection().execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]

    def _execute(self, sql: str, params: Sequence[Any]) -> int:
        with self._lock:
            connection = self._get_connection()
            with connection:
                cursor = connection.execute(sql, params)
            return cursor.lastrowid

    def _executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> int:
        with self._lock:
            connection = self._get_connection()
            with connection:
                cursor = connection.executemany(sql, rows)
            return cursor.rowcount

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type((sqlite3.OperationalError,)),
        reraise=True,
    )
    async def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Run a read query.

        Args:
            sql: SQL statement with `?` placeholders
            params: Statement parameters

        Returns:
            Rows as dictionaries
        """
        return await asyncio.to_thread(self._query, sql, params)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement in its own transaction; returns the last row id."""
        return await asyncio.to_thread(self._execute, sql, params)

    async def executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> int:
        """Run a write statement for many rows in one transaction."""
        return await asyncio.to_thread(self._executemany, sql, list(rows))

    async def close(self):
        """Close the connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
        logger.info("SQLite client closed")
