"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, with defaults for every field.  In a production
deployment override at least ``SECRET_KEY`` and set
``SESSION_COOKIE_SECURE=true`` when the site is served over HTTPS.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Community Platform API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Signing key and algorithm for session tokens.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Session cookie.  The token inside it only carries the user id; the
    # role is reloaded from the database on every request.  The default
    # lifetime is one day, extended to thirty days when the client asks
    # to be remembered at login.
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session")
    session_ttl_minutes: int = int(os.getenv("SESSION_TTL_MINUTES", str(60 * 24)))
    remember_me_ttl_minutes: int = int(os.getenv("REMEMBER_ME_TTL_MINUTES", str(60 * 24 * 30)))
    session_cookie_secure: bool = _env_flag("SESSION_COOKIE_SECURE", "false")

    # Path to the SQLite database file.  Relative paths are resolved
    # against the package directory by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "community_platform.db")

    # Create demo accounts, chat groups, events and an announcement when
    # the users table is empty at startup.  The demo accounts have
    # well-known passwords, so this is off unless asked for.
    seed_demo_data: bool = _env_flag("SEED_DEMO_DATA", "false")

    # Comma‑separated list of origins allowed to call the API from a
    # browser with credentials.
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5173")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
