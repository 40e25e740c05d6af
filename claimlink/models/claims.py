"""
Claims Model.

Immutable view over the verified key/value assertions delivered by the
identity provider.  A missing key and a key carrying an empty or null
value are different things here: mapping rules fire on key presence.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["Claims"]


class Claims(BaseModel):
    """Verified claims for one login event.

    ``email`` and ``subject_identifier`` travel alongside the attribute
    mapping; they are usually, but not necessarily, copies of the
    ``email`` and ``sub`` attributes.
    """

    model_config = ConfigDict(frozen=True)

    email: Optional[str] = None
    subject_identifier: str
    attributes: dict[str, Optional[str]] = Field(default_factory=dict)

    @classmethod
    def from_assertion(cls, mapping: Mapping[str, Optional[str]]) -> "Claims":
        """Build claims from a raw verified attribute mapping."""
        return cls(
            email=mapping.get("email"),
            subject_identifier=mapping.get("sub") or "",
            attributes=dict(mapping),
        )

    def has(self, key: str) -> bool:
        return key in self.attributes

    def get(self, key: str) -> Optional[str]:
        return self.attributes.get(key)
