"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from claimlink.models.enums import RegistrationErrorKind

T = TypeVar("T")

__all__ = ["ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All registration service methods return this.  On failure ``error``
    carries a human-readable message and ``error_kind`` the machine
    readable reason.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[UserRecord]``).
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[RegistrationErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: RegistrationErrorKind, message: str) -> "ServiceResult[T]":
        return cls(success=False, error=message, error_kind=kind)
