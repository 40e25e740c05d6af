"""
Account Matcher Service.

Resolves the subject of a login event to at most one existing directory
user.

Lookup order:
    1. Linked account by subject identifier.  The linked user only counts
       while its email still equals the claimed email and it is an
       active, non-guest user.  A stale link yields no match; it does
       not fall through to the email lookup.
    2. Without a linked account, active non-guest users by email.

Several email matches are not an error: the first in directory order is
used and a warning is logged.
"""

from __future__ import annotations

from typing import Optional

from claimlink.logger import StructuredLogger
from claimlink.models.claims import Claims
from claimlink.models.enums import MatchSource, UserType
from claimlink.models.user import UserRecord
from claimlink.repositories.directory_port import DirectoryPort
from claimlink.services.base_service import BaseService


class AccountMatcher(BaseService):
    """Finds the directory user a set of claims refers to."""

    def __init__(self, directory: DirectoryPort, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._directory = directory

    def match(self, claims: Claims) -> Optional[UserRecord]:
        user, _ = self.resolve(claims)
        return user

    def resolve(
        self, claims: Claims,
    ) -> tuple[Optional[UserRecord], Optional[MatchSource]]:
        """Like :meth:`match`, also reporting which lookup produced the user."""
        link = self._directory.find_linked_account(claims.subject_identifier)
        if link is not None:
            user = self._directory.find_user_by_id(link.user_id)
            if user is None or not self._is_eligible(user, claims.email):
                self._logger.info(
                    "Linked account for subject %s no longer matches user %s",
                    claims.subject_identifier,
                    link.user_id,
                )
                return None, None
            return user, MatchSource.LINKED_ACCOUNT

        if not claims.email:
            return None, None

        candidates = self._directory.find_users_by_email(
            claims.email, active_only=True, exclude_guest=True,
        )
        if not candidates:
            return None, None
        if len(candidates) > 1:
            self._logger.warning(
                "Email %s matches %d users; using %s",
                claims.email,
                len(candidates),
                candidates[0].id,
            )
        return candidates[0], MatchSource.EMAIL

    @staticmethod
    def _is_eligible(user: UserRecord, email: Optional[str]) -> bool:
        return (
            user.email == email
            and user.user_type != UserType.GUEST
            and user.is_active
        )
