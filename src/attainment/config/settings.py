import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .aliases import DEFAULT_ALIAS_TABLE, load_alias_table
from .engine import EngineConfig


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Engine overrides
    alias_table_path: Optional[Path] = Field(
        None, description="JSON alias table replacing the built-in one."
    )
    pass_bar: float = Field(
        80.0,
        ge=0,
        description="Overall attainment (%) a team needs to meet the bar.",
    )
    attention_threshold: float = Field(
        60.0,
        ge=0,
        description="Indicator attainment (%) below which it is listed for attention.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


def build_engine_config(settings: AppSettings) -> EngineConfig:
    """Derives the pipeline configuration from application settings."""
    alias_table = DEFAULT_ALIAS_TABLE
    if settings.alias_table_path is not None:
        alias_table = load_alias_table(settings.alias_table_path)
    return EngineConfig(
        alias_table=alias_table,
        pass_bar=settings.pass_bar,
        attention_threshold=settings.attention_threshold,
    )
