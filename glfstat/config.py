"""Configuration helpers for the glfstat service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from glfstat import __version__

DEFAULT_DATA_FILE = Path("data/glfstat.json")
DEFAULT_GPS_FIX_TIMEOUT_S = 10.0


class _Settings(BaseSettings):
    storage: Literal["file", "memory"] = Field(default="file", alias="GLFSTAT_STORAGE")
    data_file: Path = Field(default=DEFAULT_DATA_FILE, alias="GLFSTAT_DATA_FILE")
    gps_fix_timeout_s: float = Field(
        default=DEFAULT_GPS_FIX_TIMEOUT_S, gt=0, alias="GLFSTAT_GPS_FIX_TIMEOUT_S"
    )
    gps_queue_size: int = Field(default=100, ge=1, alias="GLFSTAT_GPS_QUEUE_SIZE")
    allow_clear: bool = Field(default=True, alias="GLFSTAT_ALLOW_CLEAR")
    environment: str = Field(default="development", alias="APP_ENV")
    build_version: str = Field(default=__version__, alias="BUILD_VERSION")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=4000, alias="PORT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> _Settings:
    """Return cached application settings."""

    return _Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


def cors_origins() -> list[str]:
    allow = os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    return [o.strip() for o in allow if o.strip()]


__all__ = [
    "DEFAULT_DATA_FILE",
    "DEFAULT_GPS_FIX_TIMEOUT_S",
    "cors_origins",
    "get_settings",
    "reset_settings_cache",
]
