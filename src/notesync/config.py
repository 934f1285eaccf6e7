"""
App configuration - using pydantic settings for env vars
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App settings - loads from .env file"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # basic app stuff
    app_name: str = Field(default="NoteSync")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)  # set to True for dev

    # Document store layout
    notes_collection: str = Field(default="notes", description="Collection holding note documents")

    # Auth
    min_password_length: int = Field(default=6, description="Minimum password length on sign-up")
    password_schemes: list[str] = Field(
        default=["pbkdf2_sha256"], description="passlib schemes for the local identity provider"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)-25s | %(funcName)-20s:%(lineno)-4d | %(message)s",
        description="Format of the rotating log file",
    )
    log_file: Optional[str] = Field(default=None, description="Rotating log file path (disabled if unset)")

    # Environment
    environment: str = Field(default="development", description="Environment name")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
