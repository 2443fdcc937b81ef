"""
Configuration management using Pydantic Settings.
Loads configuration from environment variables with validation.
"""
import os
from typing import List, Optional, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Nanoseconds per unit
DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
}

DEFAULT_PERCENTILES = [0.5, 0.75, 0.95, 0.99, 0.999]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


class GraphiteSettings(BaseSettings):
    """Graphite server and export cycle configuration"""
    host: str = Field(default="localhost")
    port: int = Field(default=2003, ge=1, le=65535)
    prefix: str = Field(default="")
    flush_interval_seconds: float = Field(default=60.0, gt=0)
    duration_unit: str = Field(default="ns")
    percentiles: List[float] = Field(default_factory=lambda: list(DEFAULT_PERCENTILES))
    connect_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    model_config = SettingsConfigDict(env_prefix="GRAPHITE_")

    @field_validator("duration_unit")
    @classmethod
    def _known_unit(cls, value: str) -> str:
        unit = value.strip().lower()
        if unit not in DURATION_UNITS:
            raise ValueError(
                f"duration_unit must be one of {sorted(DURATION_UNITS)}, got {value!r}"
            )
        return unit

    @field_validator("percentiles")
    @classmethod
    def _fractions_in_range(cls, value: List[float]) -> List[float]:
        for p in value:
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"percentile {p} is outside [0, 1]")
        return value

    @property
    def duration_unit_ns(self) -> int:
        return DURATION_UNITS[self.duration_unit]


class MonitoringSettings(BaseSettings):
    """Prometheus self-metrics configuration"""
    enabled: bool = Field(default=False)
    metrics_port: int = Field(default=9090, ge=1, le=65535)

    model_config = SettingsConfigDict(env_prefix="MONITORING_")


class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: str = Field(default="INFO")
    format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="LOG_")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {list(LOG_LEVELS)}, got {value!r}")
        return level

    @field_validator("format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        fmt = value.strip().lower()
        if fmt not in LOG_FORMATS:
            raise ValueError(f"format must be one of {list(LOG_FORMATS)}, got {value!r}")
        return fmt


class Settings(BaseSettings):
    """Main settings aggregating all configuration sections"""
    graphite: GraphiteSettings = Field(default_factory=GraphiteSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(extra="ignore")


def load_env_file(path: Optional[Union[str, os.PathLike]] = None) -> bool:
    """
    Load a .env file into os.environ so every nested settings section sees it.

    Variables already present in the environment win over the file.

    Args:
        path: Explicit .env path; if None, the nearest .env found walking up
            from the current working directory is used

    Returns:
        True if a file was found and loaded
    """
    if path is None:
        path = find_dotenv(usecwd=True)
        if not path:
            return False
    return load_dotenv(path)


def load_settings(env_file: Optional[Union[str, os.PathLike]] = None) -> Settings:
    """Build a fresh ``Settings`` from the environment and any .env file."""
    load_env_file(env_file)
    return Settings()
