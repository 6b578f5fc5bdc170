"""Configuration settings for the blob store."""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables (BLOB_STORE_*)."""

    model_config = SettingsConfigDict(
        env_prefix="BLOB_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./blob_store.db"
    database_echo: bool = False

    # Recompute the digest of every body returned by a full read
    verify_on_read: bool = False

    # Uploads larger than this are rejected; None disables the check
    max_upload_bytes: int | None = None

    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


settings = Settings()
