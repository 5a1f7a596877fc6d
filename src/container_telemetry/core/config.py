"""Configuration loading for the telemetry agent.

Settings come from environment variables (case-insensitive) and may be
overridden by an optional YAML or JSON file.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from container_telemetry.core.constants import (
    DEFAULT_DOCKER_TIMEOUT,
    DEFAULT_HEALTH_HOST,
    DEFAULT_HEALTH_PORT,
    DEFAULT_STATS_INTERVAL,
)
from container_telemetry.core.schemas import LogFormat, LogLevel


class AgentSettings(BaseSettings):
    """Immutable agent configuration, built once at startup.

    Attributes:
        stats_interval: Collection schedule ('@every 1m' or a cron expression)
        log_format: 'json' or 'text'
        log_level: 'info' or 'debug'
        health_host: Interface the health server binds to
        health_port: Port the health server listens on
        docker_base_url: Docker daemon URL; DOCKER_HOST handling applies when unset
        docker_timeout: Seconds before a docker API call gives up
        log_file: Optional file that receives a copy of every log record
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    stats_interval: str = Field(default=DEFAULT_STATS_INTERVAL, min_length=1)
    log_format: LogFormat = Field(default=LogFormat.JSON)
    log_level: LogLevel = Field(default=LogLevel.INFO)
    health_host: str = Field(default=DEFAULT_HEALTH_HOST)
    health_port: int = Field(default=DEFAULT_HEALTH_PORT, ge=0, le=65535)
    docker_base_url: str | None = Field(default=None)
    docker_timeout: int = Field(default=DEFAULT_DOCKER_TIMEOUT, ge=1)
    log_file: Path | None = Field(default=None)

    @field_validator("log_format", "log_level", mode="before")
    @classmethod
    def normalize_case(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_file", mode="before")
    @classmethod
    def blank_path_is_none(cls, v: object) -> object:
        return None if isinstance(v, str) and not v.strip() else v

    def environment(self) -> dict[str, str]:
        """Values reported in the startup log record."""
        return {
            "log_format": self.log_format.value,
            "log_level": self.log_level.value,
            "stats_interval": self.stats_interval,
        }


def load_config(path: Path | str | None = None) -> AgentSettings:
    """Load and validate the agent configuration.

    Args:
        path: Optional path to a YAML or JSON file. Its values override the
            environment.

    Returns:
        Validated AgentSettings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    if path is None:
        return AgentSettings()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    return AgentSettings(**(data or {}))
