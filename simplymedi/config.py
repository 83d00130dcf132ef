"""
Configuration management for SimplyMedi.

Uses Pydantic Settings for type-safe environment variable handling.
All configuration is loaded from environment variables or .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "SimplyMedi"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 5000
    api_prefix: str = "/api"

    # ==========================================================================
    # REST Client
    # ==========================================================================
    api_base_url: str = "http://localhost:5000/api"
    http_timeout_seconds: float = 30.0
    login_path: str = "/login"
    storage_path: str = ".simplymedi/storage.json"

    # ==========================================================================
    # Localization
    # ==========================================================================
    translation_cache_max_entries: int = 5000
    translation_cache_ttl_seconds: int = 24 * 60 * 60

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # ==========================================================================
    # Authentication
    # ==========================================================================
    jwt_secret: str = "simplymedi-development-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_in_seconds: int = 7 * 24 * 60 * 60

    # ==========================================================================
    # Rate Limiting
    # ==========================================================================
    rate_limit_per_minute: int = 60

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def storage_file(self) -> Path:
        """Path to the durable client storage file."""
        return Path(self.storage_path)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()
