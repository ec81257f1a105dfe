"""
taskclock Configuration System

Loads configuration from:
1. Default config (config/default.yaml in the project)
2. User config (~/.taskclock/config/taskclock.yaml)
3. Environment variables (TASKCLOCK_ prefix)

Uses Pydantic for validation and type coercion.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def expand_path(path: str | Path | None) -> Path | None:
    """Expand ~ and environment variables in paths."""
    if path is None:
        return None
    expanded = os.path.expandvars(os.path.expanduser(str(path)))
    return Path(expanded)


class AppMeta(BaseModel):
    """Core application metadata."""

    name: str = "taskclock"
    version: str = "0.1.0"


class LogConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: Path | None = None

    @field_validator("file", mode="before")
    @classmethod
    def expand_file_path(cls, v: Any) -> Path | None:
        return expand_path(v)


class EventsConfig(BaseModel):
    """Event bus configuration."""

    max_queue_size: int = 1000
    handler_timeout: float = 30.0


class ParsingConfig(BaseModel):
    """Transcript parsing configuration."""

    default_time: str = "12:00"  # applied when no time-of-day was spoken
    drop_threshold: int = 3  # chars a partial may shrink before it counts as a reset
    segment_separator: str = ". "

    @field_validator("default_time")
    @classmethod
    def validate_default_time(cls, v: str) -> str:
        match = re.fullmatch(r"(\d{1,2}):(\d{2})", v.strip())
        if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
            raise ValueError(f"default_time must be HH:MM, got {v!r}")
        return v.strip()

    @property
    def default_time_of_day(self) -> tuple[int, int]:
        hour, minute = self.default_time.split(":")
        return int(hour), int(minute)


class ScoringConfig(BaseModel):
    """Urgency re-scoring configuration."""

    refresh_interval: float = 5.0  # seconds between ranking refreshes


class RankingConfig(BaseModel):
    """Ranking and danger-zone configuration."""

    danger_zone_minutes: float = 30.0
    overdue_exclusion_hours: float = 24.0


class EnhancerConfig(BaseModel):
    """Optional external draft enhancer."""

    enabled: bool = False
    timeout: float = 10.0


class TaskClockConfig(BaseSettings):
    """
    Main taskclock configuration.

    Loads from YAML files and environment variables.
    Environment variables use TASKCLOCK_ prefix and __ for nesting.
    Example: TASKCLOCK_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKCLOCK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppMeta = Field(default_factory=AppMeta)
    log: LogConfig = Field(default_factory=LogConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    enhancer: EnhancerConfig = Field(default_factory=EnhancerConfig)


def find_config_file() -> Path | None:
    """
    Find the configuration file.

    Search order:
    1. ~/.taskclock/config/taskclock.yaml (user config)
    2. ./config/default.yaml (development default)
    3. Project default next to the installed package
    """
    user_config = Path.home() / ".taskclock" / "config" / "taskclock.yaml"
    if user_config.exists():
        return user_config

    dev_config = Path.cwd() / "config" / "default.yaml"
    if dev_config.exists():
        return dev_config

    package_config = Path(__file__).parent.parent.parent / "config" / "default.yaml"
    if package_config.exists():
        return package_config

    return None


def load_yaml_config(path: Path | None) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if path is None or not path.exists():
        return {}

    with open(path) as f:
        data = yaml.safe_load(f)

    return data if data else {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(overrides: dict[str, Any] | None = None) -> TaskClockConfig:
    """
    Load complete configuration.

    Merges:
    1. Pydantic defaults
    2. Environment variables for keys the YAML file leaves unset
    3. YAML file configuration
    4. Explicit overrides (e.g. from the command line)
    """
    yaml_config = load_yaml_config(find_config_file())
    if overrides:
        yaml_config = deep_merge(yaml_config, overrides)
    return TaskClockConfig(**yaml_config)


# Global config instance (lazy-loaded)
_config: TaskClockConfig | None = None


def get_config() -> TaskClockConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
