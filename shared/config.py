"""Environment-driven settings for the use-of-force API, dashboard, and pipeline.

Usage:
    from shared.config import get_settings

    settings = get_settings()
    settings.api_url          # http://127.0.0.1:5000/api/v1.0
    settings.processed_dir    # <repo>/data/processed

Every field can be overridden with a ``UOF_``-prefixed environment variable
(``UOF_API_BASE_URL``, ``UOF_MAPBOX_TOKEN``, ``UOF_DATA_DIR`` ...) or a ``.env``
file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="UOF_",
        env_file=".env",
        extra="ignore",
    )

    api_base_url: str = "http://127.0.0.1:5000"
    api_version: str = "v1.0"
    mapbox_token: str | None = None
    data_dir: Path = _ROOT / "data"
    source_url: str = Field(
        default=str(_ROOT / "data" / "source" / "police_use_of_force.csv"),
        description="Raw use-of-force CSV, either an http(s) URL or a local path",
    )
    # None means no timeout: a hung request keeps the loading indicator up.
    request_timeout: float | None = None
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def api_url(self) -> str:
        return f"{self.api_base_url}/api/{self.api_version}"

    @property
    def raw_dir(self) -> Path:
        return self.data_dir / "raw"

    @property
    def processed_dir(self) -> Path:
        return self.data_dir / "processed"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached settings so environment changes take effect."""
    get_settings.cache_clear()
    return get_settings()
