"""
Application-wide configuration utilities.

The flag service is embedded into the community backend processes, which pass configuration through
environment variables.  We use Pydantic BaseSettings to parse values once and cache them so every
consumer of the service shares the same object.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

THIRTY_DAYS_SECONDS = 30 * 24 * 60 * 60


class Settings(BaseSettings):
    """Runtime configuration parsed from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    app_env: Literal["dev", "test", "stage", "prod"] = "dev"
    log_level: str = "INFO"

    mongodb_uri: str = Field(default="mongodb://localhost:27017")
    mongodb_db: str = Field(default="accord")
    channel_flags_collection: str = Field(default="channel_flags")
    permissions_collection: str = Field(default="permissions")

    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_backend: Literal["redis", "memory"] = "redis"
    cache_namespace: str = Field(default="channel_flags")
    channel_flag_cache_ttl_seconds: int = Field(default=THIRTY_DAYS_SECONDS, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
