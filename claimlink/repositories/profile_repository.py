"""
Profile Repository.

Profiles are configuration owned by directory administrators; this
repository only reads them.
"""

from __future__ import annotations

from typing import Optional

from claimlink.models.directory import Profile
from claimlink.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Read-only access to role / permission profiles."""

    TABLE = "profiles"

    def get_by_name(self, name: str) -> Optional[Profile]:
        def _supabase() -> Optional[Profile]:
            response = (
                self.supabase.table(self.TABLE)
                .select("id, name")
                .eq("name", name)
                .limit(1)
                .execute()
            )
            return Profile(**response.data[0]) if response.data else None

        def _sqlite() -> Optional[Profile]:
            row = self.sqlite.execute(
                f"SELECT id, name FROM {self.TABLE} WHERE name = ?", (name,)
            ).fetchone()
            return Profile(**dict(row)) if row else None

        return self._route(_supabase, _sqlite, operation_name="get_by_name (profiles)")
