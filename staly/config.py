"""
Configuration management for the Staly backend.
Uses Pydantic Settings for environment variable management.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Staly API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Storage
    storage_backend: str = "database"
    """Key-value backend: "database" (SQLAlchemy table) or "memory"."""
    database_url: str = "sqlite+aiosqlite:///./staly.db"

    # Localization
    app_language: str = "system"
    """One of "system", "en", "ja". Drives user-facing messages."""

    # Authentication
    min_password_length: int = 4
    bcrypt_rounds: int = 12

    # Remote identity backend (empty = local-only third-party sign-in)
    remote_sign_in_url: str = ""
    remote_sign_in_timeout_seconds: float = 10.0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Reject storage and remote settings that are unusable in production."""
        if self.storage_backend not in ("database", "memory"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'database' or 'memory', got {self.storage_backend!r}"
            )
        if self.environment == "production":
            if self.storage_backend == "memory":
                raise ValueError("STORAGE_BACKEND=memory loses all data on restart; use 'database'.")
            if self.remote_sign_in_url and not self.remote_sign_in_url.startswith("https://"):
                raise ValueError("REMOTE_SIGN_IN_URL must use https:// in production.")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
