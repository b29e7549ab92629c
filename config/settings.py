"""
partition-dedup - configuration via Pydantic Settings.

Everything the command line does not cover comes from DEDUP_* environment
variables.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from config.exceptions import ConfigurationError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DedupSettings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    # Logging
    log_level: Optional[LogLevel] = None  # overrides the --verbose derived level
    log_format: Literal["console", "json"] = "console"

    # Hashing
    chunk_size: int = Field(default=65536, gt=0)

    # Reporting
    digest_prefix_length: int = Field(default=8, ge=1, le=64)

    model_config = {"env_prefix": "DEDUP_", "case_sensitive": False}

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept any case ("info", "Info")."""
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


@lru_cache
def get_settings() -> DedupSettings:
    """
    Factory for settings (cached singleton).

    Raises:
        ConfigurationError: If a DEDUP_* variable has an invalid value
    """
    try:
        return DedupSettings()
    except ValidationError as e:
        fields = ", ".join(
            "DEDUP_" + str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")
        )
        raise ConfigurationError(f"invalid environment settings: {fields or e}") from e
