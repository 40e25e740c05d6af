"""
Centralized SQLite Schema Initialization.

Defines the canonical schema for the local ClaimLink directory and provides
a single entry-point -- :func:`initialize_schema` -- that creates all
required tables idempotently.  A single-row ``schema_version`` table
records the applied version.

Uniqueness that the registration flow relies on is enforced here, at write
time: ``users.username`` and ``linked_accounts.subject_identifier`` are
``UNIQUE``, and ``organizations.name`` / ``profiles.name`` are unique so
lookups by name are unambiguous.

Usage::

    from claimlink.logger import StructuredLogger
    from claimlink.schema import initialize_schema

    initialize_schema(db.sqlite, StructuredLogger(name="schema"),
                      profile_names=["Standard User", "Community User"])
"""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Iterable

from claimlink.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 1

_TABLE_DEFINITIONS: list[str] = [
    # -- persistent structured audit trail ------------------------------------
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        action TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        details TEXT DEFAULT '{}',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- role / permission profiles -------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS organizations (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contacts (
        id TEXT PRIMARY KEY,
        organization_id TEXT NOT NULL REFERENCES organizations(id),
        first_name TEXT,
        last_name TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- directory users ------------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT,
        username TEXT NOT NULL UNIQUE,
        alias TEXT,
        first_name TEXT,
        last_name TEXT,
        mobile_phone TEXT,
        phone TEXT,
        street TEXT,
        city TEXT,
        state TEXT,
        country TEXT,
        postal_code TEXT,
        locale_key TEXT,
        language_key TEXT,
        timezone_key TEXT,
        email_encoding_key TEXT,
        profile_id TEXT REFERENCES profiles(id),
        contact_id TEXT REFERENCES contacts(id),
        user_type TEXT NOT NULL DEFAULT 'STANDARD'
             CHECK (user_type IN ('STANDARD', 'COMMUNITY', 'GUEST')),
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_email ON users (email)",
    # -- external subject -> user links ---------------------------------------
    """
    CREATE TABLE IF NOT EXISTS linked_accounts (
        id TEXT PRIMARY KEY,
        subject_identifier TEXT NOT NULL UNIQUE,
        user_id TEXT NOT NULL REFERENCES users(id),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            version INTEGER NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.commit()


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the current schema version, or ``0`` if unset."""
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row is not None else 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the single-row version tracker.  Does **not** commit."""
    conn.execute(
        """
        INSERT INTO schema_version (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = CURRENT_TIMESTAMP
        """,
        (version,),
    )


def _seed_profiles(conn: sqlite3.Connection, profile_names: Iterable[str]) -> None:
    """Insert any configured profile that is not present yet.  Does **not** commit."""
    for name in profile_names:
        conn.execute(
            "INSERT INTO profiles (id, name) VALUES (?, ?) ON CONFLICT(name) DO NOTHING",
            (str(uuid.uuid4()), name),
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def initialize_schema(
    conn: sqlite3.Connection,
    logger: StructuredLogger,
    profile_names: Iterable[str] = (),
) -> None:
    """Ensure the local SQLite directory matches the current schema version.

    Table creation and profile seeding run inside one transaction.  On
    failure the database rolls back and the error is re-raised.  Safe to
    call on every startup.

    Args:
        conn: An open SQLite connection.
        logger: Structured logger for progress output.
        profile_names: Profiles the provisioning path looks up by name.
    """
    _ensure_version_table(conn)
    current: int = _get_schema_version(conn)

    try:
        if current < CURRENT_SCHEMA_VERSION:
            logger.info(
                f"Upgrading schema from version {current} "
                f"to {CURRENT_SCHEMA_VERSION} …"
            )
            for ddl in _TABLE_DEFINITIONS:
                conn.execute(ddl)
            _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        _seed_profiles(conn, profile_names)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.error(f"Schema initialisation failed; rolled back to version {current}.")
        raise

    logger.info(f"Schema ready at version {CURRENT_SCHEMA_VERSION}.")
