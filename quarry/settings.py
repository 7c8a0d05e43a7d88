"""Process-wide settings, read from ``QUARRY_*`` environment variables."""

from functools import cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuarrySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUARRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_instance: str = Field(
        default="default",
        description="Instance name used when Database.instance() is called without a name",
    )
    profiling: bool = Field(
        default=False,
        description="Bracket each executed statement with a profiler span (requires set_profiler())",
    )
    cache_life: int = Field(
        default=60,
        ge=0,
        description="Lifetime in seconds used by Query.cached() when no lifetime is given",
    )
    cache_dir: str = Field(
        default=".quarry-cache",
        description="Directory used by FileCache when no directory is given",
    )
    config_file: Optional[str] = Field(
        default=None,
        description="YAML or JSON file holding database instance configurations",
    )


@cache
def get_settings() -> QuarrySettings:
    """Return the settings singleton (built on first call)."""
    return QuarrySettings()
