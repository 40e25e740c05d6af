"""
Attribute Mapper Service.

Translates verified claims into directory user fields.

Each rule fires only when its source claim key is present; a missing key
leaves the field alone, while a present key with an empty value is still
written.  Two fields ignore that rule: locale/language fall back to the
caller's locale when ``locale`` is absent, and the email encoding key is
forced on every call.  Applying the same claims twice yields the same
record.

The mapper never persists; the handler owns the write.
"""

from __future__ import annotations

from typing import Callable, Optional

from claimlink.logger import StructuredLogger
from claimlink.models.claims import Claims
from claimlink.models.enums import RegistrationErrorKind
from claimlink.models.service_models import ServiceResult
from claimlink.models.user import UserRecord
from claimlink.repositories.directory_port import DirectoryPort
from claimlink.services.base_service import BaseService
from claimlink.utils.nested_record import parse_nested_record

ALIAS_MAX_LENGTH: int = 8

# Address sub-field -> UserRecord field
ADDRESS_FIELDS: dict[str, str] = {
    "street_address": "street",
    "locality": "city",
    "state": "state",
    "country": "country",
    "postal_code": "postal_code",
}


def derive_alias(last_name: Optional[str], first_name: Optional[str]) -> Optional[str]:
    """Return the alias for a name pair, or ``None`` to leave alias unset.

    Last name goes first.  Only names longer than the alias limit
    produce an alias.
    """
    combined = f"{last_name or ''}{first_name or ''}"
    if len(combined) > ALIAS_MAX_LENGTH:
        return combined[:ALIAS_MAX_LENGTH].lower()
    return None


class AttributeMapper(BaseService):
    """Applies claim values onto a :class:`UserRecord`."""

    def __init__(
        self,
        directory: DirectoryPort,
        logger: StructuredLogger,
        locale_provider: Callable[[], str],
        email_encoding_key: str = "UTF-8",
    ) -> None:
        super().__init__(logger)
        self._directory = directory
        self._locale_provider = locale_provider
        self._email_encoding_key = email_encoding_key

    def prepare_user_data(self, claims: Claims, user: UserRecord) -> ServiceResult[UserRecord]:
        """Map *claims* onto *user* in place.

        Fails with ``USERNAME_CONFLICT`` when *user* is new and its
        candidate username is already taken; in that case *user* is left
        unmodified.
        """
        if user.is_new:
            username = claims.email
            if username and self._directory.username_exists(username):
                self._logger.warning("Username %s is already taken", username)
                return ServiceResult.fail(
                    RegistrationErrorKind.USERNAME_CONFLICT,
                    f"Username {username} is already in use.",
                )
            user.username = username

        if claims.has("email"):
            user.email = claims.get("email")
        if claims.has("given_name"):
            user.first_name = claims.get("given_name")
        if claims.has("family_name"):
            user.last_name = claims.get("family_name")
        if claims.has("given_name") or claims.has("family_name"):
            alias = derive_alias(user.last_name, user.first_name)
            if alias is not None:
                user.alias = alias

        if claims.has("phone_number"):
            if claims.get("phone_type") == "mobile":
                user.mobile_phone = claims.get("phone_number")
            else:
                user.phone = claims.get("phone_number")

        if claims.has("address"):
            address = parse_nested_record(claims.get("address"))
            for claim_key, field_name in ADDRESS_FIELDS.items():
                setattr(user, field_name, address.get(claim_key))

        if claims.has("locale"):
            locale = (claims.get("locale") or "").replace("-", "_")
        else:
            locale = self._locale_provider()
        user.locale_key = locale
        user.language_key = locale

        if claims.has("zoneinfo"):
            user.timezone_key = claims.get("zoneinfo")

        user.email_encoding_key = self._email_encoding_key
        return ServiceResult[UserRecord].ok(user)
