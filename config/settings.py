"""
Settings Configuration
Engine configuration validated with Pydantic.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from utils.exceptions import ConfigurationError


class EngineSettings(BaseSettings):
    """Scoring and clustering parameters for one engine run."""
    similarity_threshold: float = Field(default=0.55, description="Jaccard threshold for joining a cluster")
    max_topics: int = Field(default=30, description="Maximum topic records returned per run")
    freshness_half_life_hours: float = Field(default=24.0, description="Topic freshness half-life (hours)")
    freshness_max_hours: float = Field(default=72.0, description="Age at which topic freshness drops to 0 (hours)")
    log_level: str = Field(default="INFO", description="Log level for the engine loggers")
    cache_ttl_seconds: int = Field(default=600, description="Default TTL for host-owned caches (seconds)")

    class Config:
        env_prefix = "TRENDFORGE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("similarity_threshold")
    @classmethod
    def _threshold_in_unit_interval(cls, value: float) -> float:
        if not 0.0 <= float(value) <= 1.0:
            raise ValueError("similarity_threshold must be within [0, 1]")
        return float(value)

    @field_validator("max_topics", "cache_ttl_seconds")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if int(value) < 0:
            raise ValueError("value must be >= 0")
        return int(value)

    @field_validator("freshness_half_life_hours", "freshness_max_hours")
    @classmethod
    def _positive_hours(cls, value: float) -> float:
        if float(value) <= 0:
            raise ValueError("hours must be > 0")
        return float(value)

    @model_validator(mode="after")
    def _max_after_half_life(self) -> "EngineSettings":
        if self.freshness_max_hours < self.freshness_half_life_hours:
            raise ValueError("freshness_max_hours must be >= freshness_half_life_hours")
        return self

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None, **overrides: Any) -> "EngineSettings":
        """Load settings from a specific .env file (default ``config/.env``)."""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return build_settings(**overrides)


def build_settings(**overrides: Any) -> EngineSettings:
    """Build settings from the environment plus explicit overrides."""
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return EngineSettings(**values)
    except ValidationError as exc:
        raise ConfigurationError(
            "invalid engine settings",
            {"errors": [err.get("msg", "") for err in exc.errors()]},
        ) from exc


@lru_cache()
def get_settings() -> EngineSettings:
    """Process-wide settings singleton."""
    return EngineSettings.load_from_env_file()
