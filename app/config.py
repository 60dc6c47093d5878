"""
Centralized configuration management using pydantic-settings.
This module provides a single source of truth for all application configuration.
"""

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logger import setup_logger

load_dotenv(override=False)


logger = setup_logger("core_config")


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
        env_prefix="",
    )

    # ===== Database Configuration =====
    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Async SQLAlchemy URL of the hosted database",
    )

    database_schema: str | None = Field(
        default=None,
        alias="DATABASE_SCHEMA",
        description="Schema holding the wrestling tables (unset uses the default search path)",
    )

    database_pool_size: int = Field(
        default=10,
        alias="DATABASE_POOL_SIZE",
        description="Connection pool size for server databases",
    )

    image_column_support: bool | None = Field(
        default=None,
        alias="IMAGE_COLUMN_SUPPORT",
        description="Force image_url column support on or off instead of probing the live schema",
    )

    # ===== Object Storage Configuration =====
    storage_url: str | None = Field(
        default=None,
        alias="STORAGE_URL",
        description="Base URL of the storage REST API, e.g. https://<project>.supabase.co/storage/v1",
    )

    storage_service_key: str | None = Field(
        default=None,
        alias="STORAGE_SERVICE_KEY",
        description="Service role key used for privileged uploads",
    )

    storage_bucket: str = Field(
        default="wrestler-images",
        alias="STORAGE_BUCKET",
        description="Bucket receiving entity images",
    )

    storage_max_file_size: int = Field(
        default=10 * 1024 * 1024,
        alias="STORAGE_MAX_FILE_SIZE",
        description="Maximum image size in bytes",
    )

    storage_allowed_mime_types: list[str] = Field(
        default_factory=lambda: [
            "image/png",
            "image/jpeg",
            "image/gif",
            "image/webp",
        ],
        alias="STORAGE_ALLOWED_MIME_TYPES",
        description="MIME types accepted by the image bucket",
    )

    storage_timeout: float = Field(
        default=30.0,
        alias="STORAGE_TIMEOUT",
        description="Timeout for storage requests in seconds",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=8080, alias="SERVER_PORT", description="Server port number"
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    db_unavailable_hint: str = Field(
        default="Database connection failed. The server may be offline or network connectivity is down.",
        alias="DB_UNAVAILABLE_HINT",
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Log warnings for missing critical configurations."""
        if not self.database_url:
            logger.warning("DATABASE_URL environment variable not set.")

        if not self.storage_url or not self.storage_service_key:
            logger.warning(
                "STORAGE_URL or STORAGE_SERVICE_KEY not set. Image uploads will be unavailable."
            )

        if self.image_column_support is not None:
            logger.debug(
                f"Image column support forced to {self.image_column_support} by configuration"
            )

        return self

    @property
    def storage_configured(self) -> bool:
        return bool(self.storage_url and self.storage_service_key)


def get_settings() -> Settings:
    return Settings()
