"""
Configuration Management Module

Configures repository parameters via environment variables or .env file.
Supports SQLite (default), PostgreSQL and MySQL databases.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Repository Configuration Class

    All configuration items can be overridden by environment variables prefixed
    with MODELBASE_ (e.g. MODELBASE_DATABASE_URL).
    """

    DEBUG: bool = False

    # Database Config
    # Supports "sqlite", "postgresql" or "mysql"
    DATABASE_TYPE: Literal["sqlite", "postgresql", "mysql"] = "sqlite"
    # SQLite default database path, other databases require a full async connection string
    DATABASE_URL: str = "sqlite+aiosqlite:///./modelbase.db"

    # Repository Config
    # Commit after every write operation; set to False when the caller owns the transaction
    AUTO_COMMIT: bool = True
    # Deadline for a single executor call (seconds), None disables it
    QUERY_TIMEOUT_SECONDS: Optional[float] = None

    # Logging Config
    # Level of the "modelbase" logger: INFO shows upsert fallbacks,
    # WARNING keeps only wrapped executor failures and timeouts
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Duplicate Key Detection
    # Comma-separated error message fragments that identify a uniqueness violation.
    # Only consulted when the driver does not expose a typed error code.
    DUPLICATE_KEY_SIGNATURES: str = (
        "Duplicate entry,"
        "UNIQUE constraint failed,"
        "duplicate key value violates unique constraint"
    )

    model_config = SettingsConfigDict(
        env_prefix="MODELBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def duplicate_key_signatures(self) -> list[str]:
        """Parsed DUPLICATE_KEY_SIGNATURES"""
        return [
            part.strip()
            for part in self.DUPLICATE_KEY_SIGNATURES.split(",")
            if part.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    """
    Get repository configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Configuration instance
    """
    return Settings()
