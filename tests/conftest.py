"""
Pytest configuration and shared fixtures.
"""

import os
import tempfile

# Set environment variables BEFORE importing the package so the logger
# writes its file into a temp directory and no remote directory is used.
_temp_base = tempfile.mkdtemp(prefix="claimlink_test_")
os.environ["LOG_FILE"] = os.path.join(_temp_base, "claimlink.log")
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""

from typing import Optional

import pytest

from claimlink.config import AppConfig
from claimlink.database import DatabaseManager
from claimlink.logger import StructuredLogger
from claimlink.models.claims import Claims
from claimlink.models.user import UserRecord
from claimlink.repositories.directory_repository import DirectoryRepository
from claimlink.schema import initialize_schema
from claimlink.services import create_services

STANDARD_PROFILE = "Standard User"
COMMUNITY_PROFILE = "Community User"


@pytest.fixture
def logger():
    return StructuredLogger(name="claimlink.tests")


@pytest.fixture
def db(tmp_path, logger):
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=tmp_path / "directory.db",
        logger=logger,
    )
    initialize_schema(
        manager.sqlite, logger, profile_names=[STANDARD_PROFILE, COMMUNITY_PROFILE],
    )
    yield manager
    manager.close()


@pytest.fixture
def directory(db, logger):
    return DirectoryRepository(db=db, logger=logger)


@pytest.fixture
def make_config():
    def _make(**overrides) -> AppConfig:
        values = {
            "ALLOW_USER_CREATION": False,
            "COMMUNITY_CONTEXT_CLAIM": "sfdc_networkid",
            "COMMUNITY_ORGANIZATION_NAME": "Community Members",
            "COMMUNITY_PROFILE_NAME": COMMUNITY_PROFILE,
            "STANDARD_PROFILE_NAME": STANDARD_PROFILE,
            "DEFAULT_LOCALE": "en_US",
        }
        values.update(overrides)
        return AppConfig(**values)

    return _make


@pytest.fixture
def make_services(db, make_config):
    def _make(**overrides):
        return create_services(db, make_config(**overrides))

    return _make


@pytest.fixture
def seed_user(directory):
    def _seed(email: str, username: Optional[str] = None, **fields) -> UserRecord:
        user = UserRecord(email=email, username=username or email, **fields)
        return directory.persist(user)

    return _seed


@pytest.fixture
def make_claims():
    """Verified claims for Ann Smithsonian; ``without`` drops attribute keys."""
    def _make(
        email: Optional[str] = "ann@example.com",
        sub: str = "sub-001",
        without: tuple[str, ...] = (),
        **attributes: Optional[str],
    ) -> Claims:
        values: dict[str, Optional[str]] = {
            "email": email,
            "email_verified": "true",
            "given_name": "Ann",
            "family_name": "Smithsonian",
            "sub": sub,
        }
        values.update(attributes)
        for key in without:
            values.pop(key, None)
        return Claims(email=email, subject_identifier=sub, attributes=values)

    return _make
