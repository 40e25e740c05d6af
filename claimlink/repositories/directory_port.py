"""
Directory Port.

The only view of the external directory the registration services depend
on.  ``DirectoryRepository`` is the bundled implementation; any object
satisfying this protocol can be injected instead.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Protocol

from claimlink.models.directory import Contact, LinkedAccount, Organization, Profile
from claimlink.models.user import UserRecord


class DirectoryPort(Protocol):
    """Directory capabilities required by the registration flow."""

    def find_linked_account(self, subject_identifier: str) -> Optional[LinkedAccount]:
        ...

    def find_users_by_email(
        self, email: str, active_only: bool, exclude_guest: bool,
    ) -> list[UserRecord]:
        """Return matching users in repository order."""
        ...

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    def username_exists(self, username: str) -> bool:
        ...

    def find_or_create_organization(self, name: str) -> Organization:
        ...

    def create_contact(
        self, organization_id: str, first_name: Optional[str], last_name: Optional[str],
    ) -> Contact:
        ...

    def find_profile_by_name(self, name: str) -> Optional[Profile]:
        ...

    def persist(self, user: UserRecord) -> UserRecord:
        """Insert or update *user*; raises ``UsernameTakenError`` on collision."""
        ...

    def link_account(self, subject_identifier: str, user_id: str) -> LinkedAccount:
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Group the writes of one login event into a single unit."""
        ...
