"""
Configuration management for DMI.

This module provides environment-based configuration using Pydantic BaseSettings,
so that database engine selection, read-only mode and SQL dumping can be
changed per deployment without touching calling code.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("DMI_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the DMI_ prefix.
    For example, DMI_DATABASE_ENGINE=SQLServer selects the SQL Server dialect
    for statement rendering.

    Unprefixed fields:
    - ENVIRONMENT: Deployment environment (dev, staging, prod)
    - LOG_LEVEL: Logging level (uppercase)
    - DATABASE_URL: Connection string, also accepted as DMI_DATABASE_URL
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "DMI_DATABASE_URL"),
        description="SQLAlchemy database URL",
    )
    database_engine: str = Field(
        default="PostgreSQL",
        description="Database engine name used to pick the SQL dialect",
    )

    # Session behavior
    editable: bool = Field(
        default=True, description="Allow writes; False puts sessions in read-only mode"
    )
    capitalize: bool = Field(
        default=False, description="Upper-case SQL text before execution"
    )
    dump_sql_on_error: bool = Field(
        default=False, description="Log the SQL text of statements that fail"
    )
    dump_sql_on_execution: bool = Field(
        default=False, description="Log the SQL text of every executed statement"
    )

    # Statement rendering
    strict_delete: bool = Field(
        default=False,
        description="Reject DELETE statements that have no table instead of rendering them",
    )

    procedures_config: Optional[str] = Field(
        default=None,
        description="Path to the YAML stored procedure catalog",
    )

    @field_validator("database_engine")
    @classmethod
    def _validate_database_engine(cls, value: str) -> str:
        # Imported here to keep settings importable without the SQL package loaded
        from dmi.infrastructure.sql.dialects import DatabaseEngine

        if DatabaseEngine.from_name(value) is None:
            raise ValueError(f"Unknown database engine: {value!r}")
        return value

    def get_database_connection_string(self) -> Optional[str]:
        """
        Get the configured database URL.

        Automatically corrects 'postgres://' scheme to 'postgresql://' for
        SQLAlchemy compatibility.
        """
        final_uri = self.database_url
        if final_uri and final_uri.startswith("postgres://"):
            final_uri = final_uri.replace("postgres://", "postgresql://", 1)
        return final_uri

    model_config = SettingsConfigDict(
        env_prefix="DMI_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    settings = Settings()
    logger.debug(
        "configuration.loaded",
        environment=settings.ENVIRONMENT,
        database_engine=settings.database_engine,
        editable=settings.editable,
    )
    return settings
