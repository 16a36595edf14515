"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here so that storage backends and
logging read from one place instead of scattering os.getenv() calls.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend Selection
    # Options: "mongodb", "memory"
    storage_backend: Literal["mongodb", "memory"] = "mongodb"

    # MongoDB Configuration (default backend)
    mongodb_url: str = "localhost:27017"
    mongodb_database: str = "MAIN"
    mongodb_user: Optional[str] = None
    mongodb_password: Optional[str] = None

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_mongodb(self) -> bool:
        """Check if using MongoDB backend."""
        return self.storage_backend == "mongodb"

    @property
    def mongodb_connection_string(self) -> str:
        """Build the MongoDB URI, embedding credentials when configured."""
        if self.mongodb_url.startswith("mongodb"):
            return self.mongodb_url
        if self.mongodb_user and self.mongodb_password:
            return f"mongodb://{self.mongodb_user}:{self.mongodb_password}@{self.mongodb_url}"
        return f"mongodb://{self.mongodb_url}"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()


# Convenience export for direct import
settings = get_settings()
