"""
Registration Policy Gate.

Pure eligibility checks on verified claims.  ``email_verified`` is
compared as the literal string ``"true"``; providers that send a JSON
boolean are expected to have it stringified upstream.
"""

from __future__ import annotations

from typing import Optional

from claimlink.models.claims import Claims

__all__ = ["can_create", "can_update"]

_VERIFIED = "true"


def _email_verified(claims: Claims) -> bool:
    return claims.has("email_verified") and claims.get("email_verified") == _VERIFIED


def can_create(claims: Optional[Claims]) -> bool:
    """Claims may create or link a user: verified email and a family name."""
    if claims is None:
        return False
    return claims.has("family_name") and _email_verified(claims)


def can_update(claims: Optional[Claims]) -> bool:
    """Claims may update an existing user: verified email."""
    if claims is None:
        return False
    return _email_verified(claims)
