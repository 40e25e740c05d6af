"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (Supabase + SQLite)
- Logger reference
- Convenience properties for accessing clients
- Store routing: Supabase when configured, SQLite otherwise
"""

from __future__ import annotations

import sqlite3
from typing import Callable, TypeVar

from supabase import Client as SupabaseClient

from claimlink.database import DatabaseManager
from claimlink.logger import StructuredLogger

T = TypeVar("T")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client for cloud operations."""
        return self._db.supabase

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Returns the SQLite connection for local operations."""
        return self._db.sqlite

    def _route(
        self,
        supabase_op: Callable[[], T],
        sqlite_op: Callable[[], T],
        *,
        operation_name: str,
    ) -> T:
        """Run *operation_name* against the active directory store.

        The two stores are never mixed within a call: a Supabase failure
        is not retried against SQLite.  Errors propagate to the caller
        unchanged.
        """
        if self._db.is_online:
            self._logger.debug("%s via Supabase", operation_name)
            return supabase_op()
        self._logger.debug("%s via SQLite", operation_name)
        return sqlite_op()

    def _insert_sqlite(self, data: dict[str, object]) -> None:
        columns = list(data)
        placeholders = ", ".join("?" for _ in columns)
        with self._db.write_lock:
            self.sqlite.execute(
                f"INSERT INTO {self.TABLE} ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(data[c] for c in columns),
            )
            self._commit()

    def _commit(self) -> None:
        """Commit the SQLite transaction unless a batch is active.

        When :meth:`DatabaseManager.batch_write` is active, this is a
        no-op; the batch context manager issues a single commit (or
        rollback) when the ``with`` block exits.
        """
        if not self._db.in_batch:
            self.sqlite.commit()
