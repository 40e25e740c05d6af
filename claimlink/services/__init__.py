"""
Registration Services Package.

Services depend on the ``DirectoryPort`` for data access.

The ``create_services()`` factory wires the directory repository and every
service together, returning a typed dict the login flow can consume
without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Callable, Optional, TypedDict

from claimlink.config import AppConfig
from claimlink.database import DatabaseManager
from claimlink.logger import get_logger
from claimlink.repositories.directory_repository import DirectoryRepository
from claimlink.services.account_matcher import AccountMatcher
from claimlink.services.attribute_mapper import AttributeMapper
from claimlink.services.record_provisioner import NewRecordProvisioner
from claimlink.services.registration_handler import RegistrationHandler


class ServiceContainer(TypedDict):
    """Typed container for all registration services."""

    directory: DirectoryRepository
    account_matcher: AccountMatcher
    attribute_mapper: AttributeMapper
    record_provisioner: NewRecordProvisioner
    registration_handler: RegistrationHandler


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    locale_provider: Optional[Callable[[], str]] = None,
) -> ServiceContainer:
    """
    Wire the directory repository and all services together.

    This is the single composition root for the service layer.

    Args:
        db: Initialised DatabaseManager with the schema in place.
        config: Application configuration.
        locale_provider: Returns the invoking environment's locale, used
            when the claims carry none.  Defaults to ``config.DEFAULT_LOCALE``.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("claimlink.services")

    directory = DirectoryRepository(db=db, logger=logger)

    account_matcher = AccountMatcher(directory=directory, logger=logger)
    attribute_mapper = AttributeMapper(
        directory=directory,
        logger=logger,
        locale_provider=locale_provider or (lambda: config.DEFAULT_LOCALE),
        email_encoding_key=config.EMAIL_ENCODING_KEY,
    )
    record_provisioner = NewRecordProvisioner(
        directory=directory,
        logger=logger,
        community_context_claim=config.COMMUNITY_CONTEXT_CLAIM,
        community_organization_name=config.COMMUNITY_ORGANIZATION_NAME,
        community_profile_name=config.COMMUNITY_PROFILE_NAME,
        standard_profile_name=config.STANDARD_PROFILE_NAME,
    )

    registration_handler = RegistrationHandler(
        directory=directory,
        matcher=account_matcher,
        mapper=attribute_mapper,
        provisioner=record_provisioner,
        logger=logger,
        allow_user_creation=config.ALLOW_USER_CREATION,
        audit_conn=db.sqlite,
    )

    return ServiceContainer(
        directory=directory,
        account_matcher=account_matcher,
        attribute_mapper=attribute_mapper,
        record_provisioner=record_provisioner,
        registration_handler=registration_handler,
    )
