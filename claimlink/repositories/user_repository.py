"""
User Repository.

Handles all directory user access via Supabase (when configured) or the
local SQLite store.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional

from postgrest.exceptions import APIError

from claimlink.models.enums import UserType
from claimlink.models.user import UserRecord
from claimlink.repositories.base_repository import BaseRepository

# Postgres SQLSTATE for unique_violation.
_PG_UNIQUE_VIOLATION = "23505"


class UsernameTakenError(Exception):
    """Raised when a write collides with an existing username."""

    def __init__(self, username: Optional[str], original_error: Optional[Exception] = None) -> None:
        self.username: Optional[str] = username
        self.original_error: Optional[Exception] = original_error
        super().__init__(f"Username already exists: {username}")


class UserRepository(BaseRepository):
    """Data access layer for directory users.

    Users are never deleted here.  Deactivated users keep their row with
    ``is_active = 0`` and are invisible to login matching.
    """

    TABLE = "users"

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Fetch a user by primary key regardless of type or status."""
        def _supabase() -> Optional[UserRecord]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
            return UserRecord(**response.data) if response and response.data else None

        def _sqlite() -> Optional[UserRecord]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE id = ?", (user_id,)
            ).fetchone()
            return UserRecord(**dict(row)) if row else None

        return self._route(_supabase, _sqlite, operation_name="get_by_id (users)")

    def find_by_email(
        self,
        email: str,
        *,
        active_only: bool = True,
        exclude_guest: bool = True,
    ) -> list[UserRecord]:
        """Fetch users whose email equals *email*, oldest first.

        Email comparison is exact; no case folding is applied.
        """
        def _supabase() -> list[UserRecord]:
            query = self.supabase.table(self.TABLE).select("*").eq("email", email)
            if active_only:
                query = query.eq("is_active", True)
            if exclude_guest:
                query = query.neq("user_type", str(UserType.GUEST))
            response = query.order("created_at").execute()
            return [UserRecord(**row) for row in response.data]

        def _sqlite() -> list[UserRecord]:
            sql = f"SELECT * FROM {self.TABLE} WHERE email = ?"
            params: list[object] = [email]
            if active_only:
                sql += " AND is_active = 1"
            if exclude_guest:
                sql += " AND user_type != ?"
                params.append(str(UserType.GUEST))
            sql += " ORDER BY created_at, rowid"
            rows = self.sqlite.execute(sql, params).fetchall()
            return [UserRecord(**dict(row)) for row in rows]

        return self._route(_supabase, _sqlite, operation_name="find_by_email (users)")

    def username_exists(self, username: str) -> bool:
        def _supabase() -> bool:
            response = (
                self.supabase.table(self.TABLE)
                .select("id")
                .eq("username", username)
                .limit(1)
                .execute()
            )
            return bool(response.data)

        def _sqlite() -> bool:
            row = self.sqlite.execute(
                f"SELECT 1 FROM {self.TABLE} WHERE username = ? LIMIT 1", (username,)
            ).fetchone()
            return row is not None

        return self._route(_supabase, _sqlite, operation_name="username_exists (users)")

    def save(self, user: UserRecord) -> UserRecord:
        """Insert a new user or update an existing one.

        New users (``id is None``) get a UUID and creation timestamp.  The
        returned record is a copy; the argument is left untouched.

        Raises:
            UsernameTakenError: If the store rejects the username as a
                duplicate.
        """
        now = datetime.now(timezone.utc)
        if user.is_new:
            record = user.model_copy(
                update={"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
            )
        else:
            record = user.model_copy(update={"updated_at": now})
        data = record.model_dump(mode="json")

        def _supabase() -> UserRecord:
            table = self.supabase.table(self.TABLE)
            try:
                if user.is_new:
                    response = table.insert(data).execute()
                else:
                    fields = {k: v for k, v in data.items() if k not in ("id", "created_at")}
                    response = table.update(fields).eq("id", record.id).execute()
            except APIError as exc:
                if exc.code == _PG_UNIQUE_VIOLATION:
                    raise UsernameTakenError(record.username, original_error=exc) from exc
                raise
            return UserRecord(**response.data[0]) if response.data else record

        def _sqlite() -> UserRecord:
            try:
                if user.is_new:
                    self._insert_sqlite(data)
                else:
                    fields = {k: v for k, v in data.items() if k not in ("id", "created_at")}
                    assignments = ", ".join(f"{column} = ?" for column in fields)
                    with self._db.write_lock:
                        self.sqlite.execute(
                            f"UPDATE {self.TABLE} SET {assignments} WHERE id = ?",
                            (*fields.values(), record.id),
                        )
                        self._commit()
            except sqlite3.IntegrityError as exc:
                if str(exc) == f"UNIQUE constraint failed: {self.TABLE}.username":
                    raise UsernameTakenError(record.username, original_error=exc) from exc
                raise
            return record

        saved = self._route(_supabase, _sqlite, operation_name="save (users)")
        self._logger.info("User saved: %s", saved.id)
        return saved
