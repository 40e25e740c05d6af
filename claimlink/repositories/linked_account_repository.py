"""
Linked Account Repository.

Data access for the ``linked_accounts`` table.  Rows are insert-only.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from claimlink.models.directory import LinkedAccount
from claimlink.repositories.base_repository import BaseRepository


class LinkedAccountRepository(BaseRepository):
    """Data access layer for external subject links."""

    TABLE = "linked_accounts"

    def get_by_subject(self, subject_identifier: str) -> Optional[LinkedAccount]:
        def _supabase() -> Optional[LinkedAccount]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("subject_identifier", subject_identifier)
                .maybe_single()
                .execute()
            )
            return LinkedAccount(**response.data) if response and response.data else None

        def _sqlite() -> Optional[LinkedAccount]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE subject_identifier = ?",
                (subject_identifier,),
            ).fetchone()
            return LinkedAccount(**dict(row)) if row else None

        return self._route(
            _supabase, _sqlite, operation_name="get_by_subject (linked_accounts)",
        )

    def create(self, subject_identifier: str, user_id: str) -> LinkedAccount:
        link = LinkedAccount(
            id=str(uuid.uuid4()),
            subject_identifier=subject_identifier,
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
        )
        data = link.model_dump(mode="json")

        def _supabase() -> LinkedAccount:
            response = self.supabase.table(self.TABLE).insert(data).execute()
            return LinkedAccount(**response.data[0]) if response.data else link

        def _sqlite() -> LinkedAccount:
            self._insert_sqlite(data)
            return link

        created = self._route(_supabase, _sqlite, operation_name="create (linked_accounts)")
        self._logger.info(
            "Linked subject %s to user %s", subject_identifier, user_id,
        )
        return created
