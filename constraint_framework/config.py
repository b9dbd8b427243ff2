"""
Configuration management for the constraint framework.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings, read from ``CONSTRAINT_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONSTRAINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="constraint-framework")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get library settings."""
    return settings
