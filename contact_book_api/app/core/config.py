"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with a local SQLite file and console logging.  Override
them via environment variables in a real deployment.
"""

import os
from dataclasses import dataclass


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Contact Book API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    # Rotate the log file at this size in bytes; 0 never rotates.
    log_max_bytes: int = int(os.getenv("LOG_MAX_BYTES", "1048576"))
    log_backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "3"))

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "contact_book.db")

    # Offset pagination defaults for list and search endpoints.
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Comma‑separated list of origins allowed by the CORS middleware.
    # ``*`` allows any origin, which is what the browser UI expects
    # during local development.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# therefore be set before this module is imported.
settings = Settings()
