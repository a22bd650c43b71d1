"""Configuration for the workflow engine.

Configuration is loaded from:
- environment variables (prefixed with `WORKFLOW_ENGINE_`)
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Settings shared by the server and the CLI.

    Environment variables:
    - WORKFLOW_ENGINE_LOG_LEVEL         (optional)
    - WORKFLOW_ENGINE_DEFINITIONS_FILE  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `EngineSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )

    definitions_file: Path | None = Field(
        default=None,
        description=(
            "JSON file with one workflow definition or a list of them, admitted at startup. "
            "Any rejected definition aborts startup."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("definitions_file", mode="before")
    @classmethod
    def empty_path_to_none(cls, value: object) -> object:
        if value == "":
            return None
        return value
