"""
Repository Layer Package.

Provides data-access abstractions over Supabase (cloud) and SQLite (local).
All directory access flows through repositories; services only see the
``DirectoryPort`` protocol.

Usage:
    from claimlink.repositories import DirectoryRepository
"""

from claimlink.repositories.base_repository import BaseRepository
from claimlink.repositories.directory_port import DirectoryPort
from claimlink.repositories.directory_repository import DirectoryRepository
from claimlink.repositories.linked_account_repository import LinkedAccountRepository
from claimlink.repositories.organization_repository import (
    ContactRepository,
    OrganizationRepository,
)
from claimlink.repositories.profile_repository import ProfileRepository
from claimlink.repositories.user_repository import UserRepository, UsernameTakenError

__all__ = [
    "BaseRepository",
    "ContactRepository",
    "DirectoryPort",
    "DirectoryRepository",
    "LinkedAccountRepository",
    "OrganizationRepository",
    "ProfileRepository",
    "UserRepository",
    "UsernameTakenError",
]
