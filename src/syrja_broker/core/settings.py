"""Application settings and configuration.

This module defines all configuration options for the Syrja broker.
Settings are loaded from environment variables with sensible defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Syrja Broker", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server binding
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Directory storage
    storage_dir: str = Field(default="syrja_id_store", alias="ID_STORE_DIR")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    id_namespace_prefix: str = Field(default="syrja/", alias="ID_NAMESPACE_PREFIX")
    temporary_id_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        alias="TEMPORARY_ID_TTL_SECONDS",
    )

    # Relay admission (fixed window per origin address)
    rate_limit_count: int = Field(default=20, alias="RATE_LIMIT_COUNT")
    rate_limit_window_seconds: float = Field(default=60.0, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_origins: int = Field(default=10_000, alias="RATE_LIMIT_MAX_ORIGINS")

    # Background sweep of expired ids and stale rate windows; 0 disables it
    maintenance_interval_seconds: float = Field(
        default=300.0,
        alias="MAINTENANCE_INTERVAL_SECONDS",
    )

    # CORS configuration for browser clients
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def storage_path(self) -> Path:
        """Return the directory holding durable directory records."""
        return Path(self.storage_dir)

    @property
    def effective_database_url(self) -> str:
        """Return the database URL, defaulting to a SQLite file in the storage dir.

        Returns:
            An explicit ``DATABASE_URL`` when configured, otherwise a SQLite URL
            pointing at ``<storage_dir>/directory.db``
        """
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.storage_path / 'directory.db'}"


settings = Settings()
