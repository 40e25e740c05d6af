"""
Organization and Contact Repositories.

Community users hang off a contact, and every contact belongs to an
organization.  Organizations are matched by exact name only.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from claimlink.models.directory import Contact, Organization
from claimlink.repositories.base_repository import BaseRepository


class OrganizationRepository(BaseRepository):
    """Data access layer for organizations."""

    TABLE = "organizations"

    def get_by_name(self, name: str) -> Optional[Organization]:
        def _supabase() -> Optional[Organization]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("name", name)
                .limit(1)
                .execute()
            )
            return Organization(**response.data[0]) if response.data else None

        def _sqlite() -> Optional[Organization]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE name = ?", (name,)
            ).fetchone()
            return Organization(**dict(row)) if row else None

        return self._route(_supabase, _sqlite, operation_name="get_by_name (organizations)")

    def find_or_create(self, name: str) -> Organization:
        """Return the organization called *name*, creating it when absent."""
        existing = self.get_by_name(name)
        if existing is not None:
            return existing

        organization = Organization(
            id=str(uuid.uuid4()), name=name, created_at=datetime.now(timezone.utc),
        )
        data = organization.model_dump(mode="json")

        def _supabase() -> Organization:
            response = self.supabase.table(self.TABLE).insert(data).execute()
            return Organization(**response.data[0]) if response.data else organization

        def _sqlite() -> Organization:
            self._insert_sqlite(data)
            return organization

        created = self._route(_supabase, _sqlite, operation_name="create (organizations)")
        self._logger.info("Organization created: %s (%s)", created.name, created.id)
        return created


class ContactRepository(BaseRepository):
    """Data access layer for contacts."""

    TABLE = "contacts"

    def create(
        self,
        organization_id: str,
        first_name: Optional[str],
        last_name: Optional[str],
    ) -> Contact:
        contact = Contact(
            id=str(uuid.uuid4()),
            organization_id=organization_id,
            first_name=first_name,
            last_name=last_name,
            created_at=datetime.now(timezone.utc),
        )
        data = contact.model_dump(mode="json")

        def _supabase() -> Contact:
            response = self.supabase.table(self.TABLE).insert(data).execute()
            return Contact(**response.data[0]) if response.data else contact

        def _sqlite() -> Contact:
            self._insert_sqlite(data)
            return contact

        created = self._route(_supabase, _sqlite, operation_name="create (contacts)")
        self._logger.info("Contact created: %s", created.id)
        return created
