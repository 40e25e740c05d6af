from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models:
    from claimlink.models import Claims, UserRecord, LinkedAccount
    from claimlink.models import UserType, RegistrationErrorKind
"""

from claimlink.models.enums import MatchSource, RegistrationErrorKind, UserType
from claimlink.models.claims import Claims
from claimlink.models.user import UserRecord
from claimlink.models.directory import Contact, LinkedAccount, Organization, Profile
from claimlink.models.service_models import ServiceResult

__all__ = [
    "MatchSource",
    "RegistrationErrorKind",
    "UserType",
    "Claims",
    "UserRecord",
    "Contact",
    "LinkedAccount",
    "Organization",
    "Profile",
    "ServiceResult",
]
