"""
Directory Entity Models.

Linked accounts, organizations, contacts and profiles.  All of them are
owned by the directory; the registration handler only looks them up or,
in the provisioning path, creates them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

__all__ = ["Contact", "LinkedAccount", "Organization", "Profile"]


class LinkedAccount(BaseModel):
    """Association between an external subject and a directory user.

    Invariants:
    - ``subject_identifier`` is unique (public subject type, provider scoped)
    - the record is never mutated after creation
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    subject_identifier: str
    user_id: str
    created_at: Optional[datetime] = None


class Organization(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: Optional[datetime] = None


class Contact(BaseModel):
    """A person record under an organization, used by community users."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None


class Profile(BaseModel):
    """Role / permission profile referenced by ``UserRecord.profile_id``."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
