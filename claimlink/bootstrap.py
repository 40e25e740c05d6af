"""
ClaimLink Bootstrap.

Builds the whole dependency graph via constructor injection: opens the
directory stores, initialises the local schema and wires the services.
Every subsystem is created here; no module-level globals.

Usage::

    from claimlink.bootstrap import bootstrap

    db, services = bootstrap()
    result = services["registration_handler"].create_or_link_user(context_id, claims)
"""

from __future__ import annotations

from typing import Callable, Optional

from claimlink.config import AppConfig, get_config
from claimlink.database import DatabaseManager
from claimlink.logger import StructuredLogger, get_logger
from claimlink.schema import initialize_schema
from claimlink.services import ServiceContainer, create_services


def bootstrap(
    config: Optional[AppConfig] = None,
    locale_provider: Optional[Callable[[], str]] = None,
) -> tuple[DatabaseManager, ServiceContainer]:
    """Wire configuration, database, schema and services.

    The caller owns the returned ``DatabaseManager`` and should ``close()``
    it on shutdown.
    """
    logger: StructuredLogger = get_logger("claimlink.bootstrap")
    config = config or get_config()

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=config.SQLITE_PATH,
        logger=StructuredLogger(name="claimlink.database"),
    )

    initialize_schema(
        db.sqlite,
        StructuredLogger(name="claimlink.schema"),
        profile_names=[config.STANDARD_PROFILE_NAME, config.COMMUNITY_PROFILE_NAME],
    )

    services = create_services(db, config, locale_provider=locale_provider)
    logger.info(
        "Registration handler ready (creation %s).",
        "enabled" if config.ALLOW_USER_CREATION else "disabled",
    )
    return db, services
