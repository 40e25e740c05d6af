"""
Application Configuration.

Pydantic Settings model for the ClaimLink registration handler.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase (optional remote directory) ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Local directory store ---
    SQLITE_PATH: Path = Path("claimlink_directory.db")

    # --- Registration policy ---
    # Creating net-new users is a capability that must be switched on.
    ALLOW_USER_CREATION: bool = False

    # Claim whose presence marks a community / partner login.
    COMMUNITY_CONTEXT_CLAIM: str = "sfdc_networkid"

    COMMUNITY_ORGANIZATION_NAME: str = "Community Members"
    COMMUNITY_PROFILE_NAME: str = "Community User"
    STANDARD_PROFILE_NAME: str = "Standard User"

    # --- Attribute mapping ---
    DEFAULT_LOCALE: str = "en_US"
    EMAIL_ENCODING_KEY: str = "UTF-8"

    # --- Logging ---
    LOG_FILE: str = "claimlink.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing.
        This validator logs a warning so operators know the handler is
        running against the local directory store only.
        """
        _log = logging.getLogger("claimlink.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty; the directory is served from the "
                "local SQLite store only."
            )

        if self.ALLOW_USER_CREATION:
            _log.info("User creation is enabled for unmatched subjects.")

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern to avoid the lock overhead on the fast path while remaining
    thread-safe during first initialisation.

    Prefer direct constructor injection of ``AppConfig``; the registration
    handler never reads this singleton itself.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
