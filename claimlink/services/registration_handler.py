"""
Registration Handler.

Entry point called by the federated login flow once the identity
assertion has been verified.

Flow for :meth:`RegistrationHandler.create_or_link_user`:
    1. Policy gate (``can_create``).
    2. Match the subject to an existing user (linked account, then email).
    3. Matched: map claims onto the user, persist, and record a linked
       account when the match came from the email fallback.
    4. Unmatched: refuse unless creation is enabled; otherwise map,
       provision profile / contact, persist and link.

All writes for one event run inside ``DirectoryPort.atomic()``; a failure
leaves nothing behind in the local store.  Rejections come back as a
``ServiceResult`` with an ``error_kind``.  Directory failures are logged
and re-raised unchanged.

Concurrency: the username pre-check and the insert are not atomic.  A
duplicate username rejected by the store at write time is reported as
``USERNAME_CONFLICT``, exactly like a pre-check hit.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from claimlink.logger import StructuredLogger
from claimlink.models.claims import Claims
from claimlink.models.enums import MatchSource, RegistrationErrorKind
from claimlink.models.service_models import ServiceResult
from claimlink.models.user import UserRecord
from claimlink.repositories.directory_port import DirectoryPort
from claimlink.repositories.user_repository import UsernameTakenError
from claimlink.services.account_matcher import AccountMatcher
from claimlink.services.attribute_mapper import AttributeMapper
from claimlink.services.base_service import BaseService
from claimlink.services.policy_gate import can_create, can_update
from claimlink.services.record_provisioner import NewRecordProvisioner
from claimlink.utils.audit import log_audit_event


class RegistrationHandler(BaseService):
    """Decides link / create / reject for a verified login and applies the mapping."""

    def __init__(
        self,
        directory: DirectoryPort,
        matcher: AccountMatcher,
        mapper: AttributeMapper,
        provisioner: NewRecordProvisioner,
        logger: StructuredLogger,
        *,
        allow_user_creation: bool = False,
        audit_conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        super().__init__(logger)
        self._directory = directory
        self._matcher = matcher
        self._mapper = mapper
        self._provisioner = provisioner
        self._allow_user_creation = allow_user_creation
        self._audit_conn = audit_conn

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_or_link_user(self, context_id: Optional[str], claims: Claims) -> ServiceResult[UserRecord]:
        """Return the user for a login event, creating one if allowed.

        Args:
            context_id: Login context (community / site id); logged only.
            claims: Verified claims for the event.

        Returns:
            ``ServiceResult`` carrying the persisted user, or a failure with
            ``INELIGIBLE_CREATE``, ``USERNAME_CONFLICT`` or
            ``CREATION_REFUSED``.
        """
        if not can_create(claims):
            self._logger.login_event(
                "ineligible",
                "Registration rejected: missing family_name or unverified email",
                subject=claims.subject_identifier if claims else None,
                context_id=context_id,
            )
            return ServiceResult.fail(
                RegistrationErrorKind.INELIGIBLE_CREATE,
                "Claims are not eligible to create or link a user: "
                "a verified email and a family name are required.",
            )

        try:
            user, source = self._matcher.resolve(claims)
            if user is not None:
                return self._link_existing(context_id, claims, user, source)

            if not self._allow_user_creation:
                self._logger.login_event(
                    "refused",
                    "No user matches and creation is disabled",
                    subject=claims.subject_identifier,
                    context_id=context_id,
                )
                return ServiceResult.fail(
                    RegistrationErrorKind.CREATION_REFUSED,
                    "No matching user exists and user creation is disabled.",
                )

            return self._create_new(context_id, claims)
        except UsernameTakenError as exc:
            self._logger.login_event(
                "username_conflict",
                "Username %s rejected by the directory at write time",
                exc.username,
                subject=claims.subject_identifier,
                context_id=context_id,
                level=logging.WARNING,
            )
            return ServiceResult.fail(
                RegistrationErrorKind.USERNAME_CONFLICT,
                f"Username {exc.username} is already in use.",
            )
        except Exception as exc:
            self._logger.error(
                "Registration failed for subject %s: %s",
                claims.subject_identifier,
                exc,
                exc_info=True,
            )
            raise

    def update_user(
        self, user_id: str, context_id: Optional[str], claims: Claims,
    ) -> ServiceResult[None]:
        """Re-apply claims to an already linked user.

        Returns:
            Empty success, or a failure with ``INELIGIBLE_UPDATE`` or
            ``NOT_FOUND_FOR_UPDATE``.
        """
        if not can_update(claims):
            self._logger.info("Update rejected for user %s: email not verified", user_id)
            return ServiceResult.fail(
                RegistrationErrorKind.INELIGIBLE_UPDATE,
                "Claims are not eligible to update a user: a verified email is required.",
            )

        try:
            user = self._directory.find_user_by_id(user_id)
            if user is None:
                self._logger.warning("Update requested for unknown user %s", user_id)
                return ServiceResult.fail(
                    RegistrationErrorKind.NOT_FOUND_FOR_UPDATE,
                    f"User {user_id} does not exist.",
                )

            mapped = self._mapper.prepare_user_data(claims, user)
            if not mapped.success:
                return ServiceResult.fail(mapped.error_kind, mapped.error or "")

            with self._directory.atomic():
                saved = self._directory.persist(user)
                self._audit("REGISTER_UPDATE", saved, claims, context_id)
            self._logger.login_event(
                "updated",
                "Claims applied to user",
                subject=claims.subject_identifier,
                context_id=context_id,
                user_id=saved.id,
            )
            return ServiceResult.ok()
        except UsernameTakenError as exc:
            self._logger.login_event(
                "username_conflict",
                "Username %s rejected by the directory at write time",
                exc.username,
                subject=claims.subject_identifier,
                context_id=context_id,
                user_id=user_id,
                level=logging.WARNING,
            )
            return ServiceResult.fail(
                RegistrationErrorKind.USERNAME_CONFLICT,
                f"Username {exc.username} is already in use.",
            )
        except Exception as exc:
            self._logger.error(
                "Update failed for user %s: %s", user_id, exc, exc_info=True,
            )
            raise

    # ------------------------------------------------------------------
    # Private implementation
    # ------------------------------------------------------------------

    def _link_existing(
        self,
        context_id: Optional[str],
        claims: Claims,
        user: UserRecord,
        source: Optional[MatchSource],
    ) -> ServiceResult[UserRecord]:
        mapped = self._mapper.prepare_user_data(claims, user)
        if not mapped.success:
            return ServiceResult.fail(mapped.error_kind, mapped.error or "")

        with self._directory.atomic():
            saved = self._directory.persist(user)
            if source == MatchSource.EMAIL:
                self._link_if_unlinked(claims.subject_identifier, saved.id)
            self._audit("REGISTER_LINK", saved, claims, context_id, source)

        self._logger.login_event(
            "linked",
            "Subject mapped to existing user",
            subject=claims.subject_identifier,
            context_id=context_id,
            user_id=saved.id,
            match_source=source,
        )
        return ServiceResult[UserRecord].ok(saved)

    def _create_new(self, context_id: Optional[str], claims: Claims) -> ServiceResult[UserRecord]:
        user = UserRecord()
        mapped = self._mapper.prepare_user_data(claims, user)
        if not mapped.success:
            return ServiceResult.fail(mapped.error_kind, mapped.error or "")

        with self._directory.atomic():
            self._provisioner.provision(claims, user)
            saved = self._directory.persist(user)
            self._link_if_unlinked(claims.subject_identifier, saved.id)
            self._audit("REGISTER_CREATE", saved, claims, context_id)

        self._logger.login_event(
            "created",
            "Subject created a %s user",
            saved.user_type,
            subject=claims.subject_identifier,
            context_id=context_id,
            user_id=saved.id,
        )
        return ServiceResult[UserRecord].ok(saved)

    def _link_if_unlinked(self, subject_identifier: Optional[str], user_id: str) -> None:
        """Record a linked account for *subject_identifier* unless one exists.

        An existing link is left as-is even when it points at another user
        (a stale link); subjects are linked at most once.
        """
        if not subject_identifier:
            return
        existing = self._directory.find_linked_account(subject_identifier)
        if existing is not None:
            self._logger.warning(
                "Subject %s already linked to user %s; not linking user %s",
                subject_identifier,
                existing.user_id,
                user_id,
            )
            return
        self._directory.link_account(subject_identifier, user_id)

    def _audit(
        self,
        action: str,
        user: UserRecord,
        claims: Claims,
        context_id: Optional[str],
        source: Optional[MatchSource] = None,
    ) -> None:
        log_audit_event(
            logger=self._logger,
            action=action,
            entity_type="User",
            entity_id=user.id or "",
            user_id=claims.subject_identifier,
            details={
                "context_id": context_id,
                "username": user.username,
                "match_source": str(source) if source else None,
            },
            conn=self._audit_conn,
        )
