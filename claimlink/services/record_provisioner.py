"""
New Record Provisioner Service.

Decides the shape of a net-new directory user once the handler has
decided to create one:

    - Community / partner login: the user is attached to a contact under
      the shared community organization and gets the community profile.
    - Anything else: the user gets the standard profile.

Names must already be mapped onto the record; the contact is created
from them.  Profiles are directory configuration: a missing profile
raises :class:`ProfileNotFoundError` and is not handled here.
"""

from __future__ import annotations

from claimlink.logger import StructuredLogger
from claimlink.models.claims import Claims
from claimlink.models.directory import Profile
from claimlink.models.enums import UserType
from claimlink.models.user import UserRecord
from claimlink.repositories.directory_port import DirectoryPort
from claimlink.services.base_service import BaseService


class ProfileNotFoundError(Exception):
    """A profile required for provisioning is not configured in the directory."""

    def __init__(self, profile_name: str) -> None:
        self.profile_name: str = profile_name
        super().__init__(f"Profile not found in directory: {profile_name}")


class NewRecordProvisioner(BaseService):
    """Assigns profile and organizational linkage to new users."""

    def __init__(
        self,
        directory: DirectoryPort,
        logger: StructuredLogger,
        *,
        community_context_claim: str,
        community_organization_name: str,
        community_profile_name: str,
        standard_profile_name: str,
    ) -> None:
        super().__init__(logger)
        self._directory = directory
        self._community_context_claim = community_context_claim
        self._community_organization_name = community_organization_name
        self._community_profile_name = community_profile_name
        self._standard_profile_name = standard_profile_name

    def is_community_context(self, claims: Claims) -> bool:
        return claims.has(self._community_context_claim)

    def provision(self, claims: Claims, user: UserRecord) -> UserRecord:
        """Attach profile (and contact, for community logins) to *user*."""
        if self.is_community_context(claims):
            organization = self._directory.find_or_create_organization(
                self._community_organization_name,
            )
            contact = self._directory.create_contact(
                organization.id, user.first_name, user.last_name,
            )
            profile = self._require_profile(self._community_profile_name)
            user.contact_id = contact.id
            user.user_type = UserType.COMMUNITY
            self._logger.info(
                "Provisioning community user with contact %s in organization %s",
                contact.id,
                organization.id,
            )
        else:
            profile = self._require_profile(self._standard_profile_name)
            user.user_type = UserType.STANDARD
            self._logger.info("Provisioning standard user")

        user.profile_id = profile.id
        return user

    def _require_profile(self, name: str) -> Profile:
        profile = self._directory.find_profile_by_name(name)
        if profile is None:
            self._logger.error("Profile %s is not configured", name)
            raise ProfileNotFoundError(name)
        return profile
