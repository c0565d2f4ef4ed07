from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the bulk-paste importer.

These are populated by tackle_import.config.loader after schema validation.
Environment variables take precedence over the database/identity sections.
"""

DEFAULT_REQUEST_TIMEOUT_SECONDS = 8.0
DEFAULT_ERROR_DISPLAY_LIMIT = 20
DEFAULT_PREVIEW_LIMIT = 50
DEFAULT_SUCCESS_MESSAGE_SECONDS = 1.8


@dataclass(frozen=True)
class DatabaseConfig:
    """Record store connection configuration.

    Used as fallback when DATABASE_URL / PGDSN / PG* variables are not set.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class IdentityConfig:
    """Fallback owner identity when TACKLE_OWNER_ID is not set."""
    owner_id: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    error_display_limit: int = DEFAULT_ERROR_DISPLAY_LIMIT
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    success_message_seconds: float = DEFAULT_SUCCESS_MESSAGE_SECONDS
