"""
Shared Enumerations for ClaimLink Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so stored values like ``'GUEST'`` round-trip without conversion.
"""

from __future__ import annotations
from enum import StrEnum


class UserType(StrEnum):
    """Directory user types.

    ``GUEST`` covers anonymous / site-guest accounts.  Guests are never
    eligible as a login match.
    """

    STANDARD = "STANDARD"
    COMMUNITY = "COMMUNITY"
    GUEST = "GUEST"


class RegistrationErrorKind(StrEnum):
    """Failure kinds surfaced by the registration handler.

    Callers branch on the kind, never on the message text.
    """

    INELIGIBLE_CREATE = "INELIGIBLE_CREATE"
    INELIGIBLE_UPDATE = "INELIGIBLE_UPDATE"
    USERNAME_CONFLICT = "USERNAME_CONFLICT"
    CREATION_REFUSED = "CREATION_REFUSED"
    NOT_FOUND_FOR_UPDATE = "NOT_FOUND_FOR_UPDATE"


class MatchSource(StrEnum):
    """How an existing user was resolved for a login event."""

    LINKED_ACCOUNT = "LINKED_ACCOUNT"
    EMAIL = "EMAIL"
