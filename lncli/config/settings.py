"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from two sources (in priority order):

  1. Environment variables, prefixed ``LNCLI_`` -- e.g.
     ``LNCLI_BASE_URL=https://novelfull.net``
  2. A ``.env`` file in the working directory

Defaults below apply when neither source sets a field.  The library file
defaults to ``$XDG_CONFIG_HOME/lncli/data.json`` (``~/.config/lncli``
when ``XDG_CONFIG_HOME`` is unset).
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lncli.models.library import RECENT_LIMIT
from lncli.utils.errors import ConfigurationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_data_path() -> Path:
    """Return the per-user library file location."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "lncli" / "data.json"


class Settings(BaseSettings):
    """lncli application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="LNCLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Source site ===
    base_url: str = "https://novelfull.com"
    user_agent: str = "Mozilla/5.0 (compatible; lncli/0.1; +https://github.com/lncli)"
    http_timeout: float = 15.0

    # === Library store ===
    data_path: Path = Field(default_factory=default_data_path)
    # The recency list never holds more than RECENT_LIMIT entries; this can
    # only lower it.
    recent_limit: int = Field(default=RECENT_LIMIT, ge=1, le=RECENT_LIMIT)

    # === Update check ===
    # Kept small: the source site is a single host and throttles bursts.
    update_concurrency: int = Field(default=4, ge=1)
    update_timeout: float = Field(default=20.0, gt=0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "WARNING"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Build :class:`Settings` from the environment plus *overrides*.

    Raises
    ------
    ConfigurationError
        If any value (from the environment, ``.env`` or *overrides*)
        fails validation.  ``source`` names the offending field.
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            message=f"invalid configuration: {first['msg']}",
            source=field,
        ) from exc
