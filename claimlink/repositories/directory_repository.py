"""
Directory Repository.

Implements :class:`~claimlink.repositories.directory_port.DirectoryPort`
on top of the per-table repositories.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional

from claimlink.database import DatabaseManager
from claimlink.logger import StructuredLogger
from claimlink.models.directory import Contact, LinkedAccount, Organization, Profile
from claimlink.models.user import UserRecord
from claimlink.repositories.linked_account_repository import LinkedAccountRepository
from claimlink.repositories.organization_repository import (
    ContactRepository,
    OrganizationRepository,
)
from claimlink.repositories.profile_repository import ProfileRepository
from claimlink.repositories.user_repository import UserRepository


class DirectoryRepository:
    """Directory facade over users, links, organizations, contacts and profiles."""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self.users = UserRepository(db=db, logger=logger)
        self.linked_accounts = LinkedAccountRepository(db=db, logger=logger)
        self.organizations = OrganizationRepository(db=db, logger=logger)
        self.contacts = ContactRepository(db=db, logger=logger)
        self.profiles = ProfileRepository(db=db, logger=logger)

    def find_linked_account(self, subject_identifier: str) -> Optional[LinkedAccount]:
        return self.linked_accounts.get_by_subject(subject_identifier)

    def find_users_by_email(
        self, email: str, active_only: bool = True, exclude_guest: bool = True,
    ) -> list[UserRecord]:
        return self.users.find_by_email(
            email, active_only=active_only, exclude_guest=exclude_guest,
        )

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get_by_id(user_id)

    def username_exists(self, username: str) -> bool:
        return self.users.username_exists(username)

    def find_or_create_organization(self, name: str) -> Organization:
        return self.organizations.find_or_create(name)

    def create_contact(
        self, organization_id: str, first_name: Optional[str], last_name: Optional[str],
    ) -> Contact:
        return self.contacts.create(organization_id, first_name, last_name)

    def find_profile_by_name(self, name: str) -> Optional[Profile]:
        return self.profiles.get_by_name(name)

    def persist(self, user: UserRecord) -> UserRecord:
        return self.users.save(user)

    def link_account(self, subject_identifier: str, user_id: str) -> LinkedAccount:
        return self.linked_accounts.create(subject_identifier, user_id)

    def atomic(self) -> AbstractContextManager[None]:
        return self._db.batch_write()
