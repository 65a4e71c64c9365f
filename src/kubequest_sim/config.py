"""Runtime settings for kubequest-sim, loaded from ``KUBEQUEST_*`` env vars."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tunable knobs for a debugging session.

    Every field can be overridden through the environment, e.g.
    ``KUBEQUEST_START_DELAY_SECONDS=0`` turns off the simulated loading pause.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBEQUEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    start_delay_seconds: float = Field(1.0, ge=0.0, description="Pause before a scenario is loaded")
    completion_delay_seconds: float = Field(
        2.0, ge=0.0, description="Pause before the completion message is posted"
    )
    default_scenario_id: str = Field("crashloop-1", description="Fallback for lenient lookups")
    strict_scenario_lookup: bool = Field(
        True, description="Raise on unknown scenario ids instead of falling back"
    )
    default_namespace: str = Field("default", description="Namespace used when -n is omitted")
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level


__all__ = ["Settings"]
