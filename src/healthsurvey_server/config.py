"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from healthsurvey_core.constants import POLL_INTERVAL_SECONDS, REQUEST_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS — comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    # Remote classifier base URL (serves /api/status and /predict)
    survey_endpoint: str = "http://localhost:8000"

    # Schema table (None → schema bundled with healthsurvey_core)
    schema_path: str | None = None

    # Availability polling and request timeout, in seconds
    poll_interval: float = POLL_INTERVAL_SECONDS
    request_timeout: float = REQUEST_TIMEOUT_SECONDS

    # Idle time (seconds) after which an abandoned session is closed.
    # 0 disables expiry.
    session_ttl_seconds: float = 3600


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*``, ``SURVEY_*`` and ``SESSION_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        survey_endpoint=os.getenv("SURVEY_ENDPOINT", "http://localhost:8000"),
        schema_path=os.getenv("SURVEY_SCHEMA_PATH") or None,
        poll_interval=POLL_INTERVAL_SECONDS,
        request_timeout=REQUEST_TIMEOUT_SECONDS,
        session_ttl_seconds=float(os.getenv("SESSION_TTL_SECONDS", "3600")),
    )
