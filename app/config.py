"""
Configuration Module

Centralizes all application configuration and environment variables.
Uses pydantic-settings for validation and type coercion.

Usage:
    from app.config import settings

    # Access settings
    db_url = settings.database_url
    pool = settings.pool_settings()
"""

from typing import Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.schemas import PoolSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string injected by the deployment"
    )
    database_ssl: bool = Field(
        default=False,
        description="Negotiate TLS with the database server"
    )
    database_ssl_verify: bool = Field(
        default=True,
        description="Verify the server certificate and hostname when TLS is on"
    )
    database_pool_min_size: int = Field(
        default=1,
        description="Connections opened when the pool is created"
    )
    database_pool_max_size: int = Field(
        default=10,
        description="Upper bound on pooled connections"
    )
    database_command_timeout: float = Field(
        default=30.0,
        description="Per-query timeout in seconds"
    )

    # HTTP server
    host: str = Field(
        default="0.0.0.0",
        description="Interface the web process binds to"
    )
    port: int = Field(
        default=3000,
        description="Port the web process listens on"
    )
    app_title: str = Field(
        default="App",
        description="Title shown on the index page"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    debug: bool = Field(
        default=False,
        description="Include exception text in 500 responses"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def has_database(self) -> bool:
        """Check if database is configured."""
        return bool(self.database_url)

    def pool_settings(self) -> PoolSettings:
        """
        Build the connection pool configuration.

        Raises:
            DatabaseNotConfiguredError: If DATABASE_URL is not set
        """
        from app.db.errors import DatabaseNotConfiguredError

        if not self.has_database:
            raise DatabaseNotConfiguredError(
                "DATABASE_URL environment variable is not set. "
                "Set it to your PostgreSQL connection string."
            )

        return PoolSettings(
            dsn=self.database_url,
            ssl=self.database_ssl,
            ssl_verify=self.database_ssl_verify,
            min_size=self.database_pool_min_size,
            max_size=self.database_pool_max_size,
            command_timeout=self.database_command_timeout,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience alias
settings = get_settings()
