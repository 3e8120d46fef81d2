"""Engine settings using Pydantic Settings.

Centralized configuration for the distribution engine. Every value can be
overridden with a ``FARAID_`` prefixed environment variable or a ``.env``
file, e.g. ``FARAID_LOG_LEVEL=DEBUG`` or ``FARAID_CATALOG_PATH=/etc/faraid/catalog.yaml``.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Main engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="FARAID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Fara'id Estate Engine", description="Application name")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Emit JSON formatted logs")

    # Catalog
    catalog_path: Optional[Path] = Field(
        default=None,
        description="YAML catalog overriding the bundled default catalog"
    )

    # Report rendering
    share_decimal_places: int = Field(
        default=6, ge=0, le=28,
        description="Decimal places used when rendering fractions"
    )
    money_decimal_places: int = Field(
        default=2, ge=0, le=8,
        description="Decimal places for monetary amounts"
    )
    include_excluded_heirs: bool = Field(
        default=True,
        description="List excluded heirs (with a zero share) in the report"
    )

    @field_validator('log_level', mode='before')
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached engine settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    settings = Settings()
    logger.debug("Loaded settings for environment %s", settings.environment)
    return settings
