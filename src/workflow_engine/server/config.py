"""Configuration for the REST server."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Settings for the REST API.

    Engine-level settings (log level, seed definitions) live in
    :class:`workflow_engine.engine.config.EngineSettings`.
    """

    title: str = Field(default="Workflow State Engine", description="OpenAPI title")

    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins. Empty disables CORS.",
    )

    model_config = SettingsConfigDict(env_prefix="WORKFLOW_ENGINE_", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
