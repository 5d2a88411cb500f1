"""Configuration for geturilist using pydantic-settings.

All settings are driven by environment variables with the GUL_ prefix.
``GUL_OUTPUT_BUCKET`` is required; everything else has a default.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger(__name__)


class NameFormat(str, Enum):
    """How output object names are derived from the requested URL."""

    SHA1 = "sha1"
    URL = "url"
    HOSTNAME = "hostname"


class Settings(BaseSettings):
    """Run configuration loaded from environment variables.

    Immutable once constructed; build it once with :func:`load_settings`
    and pass it into the pipeline.
    """

    model_config = SettingsConfigDict(
        env_prefix="GUL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    output_bucket: str = Field(min_length=1)
    name_format: NameFormat = NameFormat.SHA1
    concurrency: int = Field(default=3, gt=0)
    sleep_seconds: float = Field(default=0.0, ge=0.0)

    request_timeout: float = Field(default=10.0, gt=0.0)
    max_redirects: int = Field(default=10, ge=0)
    user_agent: str = "geturilist/0.1"
    progress_every: int = Field(default=100, gt=0)

    storage_root: Path = Path(".")


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "settings"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, applying explicit overrides.

    Raises:
        ConfigError: When a required option is missing or a value is invalid.
    """
    try:
        s = Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {_describe_errors(exc)}") from exc

    logger.debug(
        "Settings: output_bucket=%s name_format=%s concurrency=%d sleep_seconds=%s",
        s.output_bucket, s.name_format.value, s.concurrency, s.sleep_seconds,
    )
    if s.name_format is NameFormat.HOSTNAME:
        logger.warning(
            "name_format=hostname: URLs sharing a host will overwrite each other"
        )
    return s
