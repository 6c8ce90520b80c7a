"""
Library Settings (Pydantic Settings).

Tunes how envar finds, expands and binds .env files. Values come from
ENVAR_* environment variables only; envar never reads its own settings
from a .env file, since that file is what it is configured to load.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Envar settings loaded from ENVAR_* environment variables.

    Example:
        ENVAR_ENV_FILENAME=.env.local ENVAR_LOG_FORMAT=json python app.py
    """

    model_config = SettingsConfigDict(
        env_prefix="ENVAR_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # LOADER
    # ========================================================================
    ENV_FILENAME: str = Field(
        default=".env",
        min_length=1,
        description="Config file name looked up in each requested directory",
    )
    EXPAND_VARIABLES: bool = Field(
        default=True, description="Substitute ${NAME} placeholders before committing"
    )
    MAX_EXPANSION_PASSES: int = Field(
        default=10,
        description="Substitution passes allowed before a value is reported as cyclic",
        ge=1,
        le=100,
    )
    MAX_WORKERS: int | None = Field(
        default=None,
        description="Cap on concurrent file loads (None: one worker per directory)",
        ge=1,
    )

    # ========================================================================
    # BINDER
    # ========================================================================
    TAG_NAME: str = Field(
        default="env",
        min_length=1,
        description="Field metadata key naming the bound environment variable",
    )

    # ========================================================================
    # LOGGING
    # ========================================================================
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="text", pattern="^(json|text)$")
