"""
User Record Model.

Pydantic model for the directory user being created or updated.  The
mapper mutates an instance in place; persistence is the repository's job.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from claimlink.models.enums import UserType


class UserRecord(BaseModel):
    """Represents a directory user.

    ``id`` is ``None`` until the record has been persisted, which is how
    the mapper tells a net-new user from an existing one.
    """

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    alias: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    mobile_phone: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    locale_key: Optional[str] = None
    language_key: Optional[str] = None
    timezone_key: Optional[str] = None
    email_encoding_key: Optional[str] = None
    profile_id: Optional[str] = None
    contact_id: Optional[str] = None
    user_type: UserType = UserType.STANDARD
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_new(self) -> bool:
        return self.id is None
