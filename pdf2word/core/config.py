from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_csv_str(v: str) -> List[str]:
    """Parse a comma-separated string into a list of values, stripping whitespace."""
    return [x.strip() for x in v.split(",") if x.strip()]


class Settings(BaseSettings):
    """
    Application configuration settings, loaded from environment variables.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    commit_sha: Optional[str] = None

    # ``NODE_ENV`` is still honoured so existing deployment manifests keep working.
    environment: str = Field(
        default="production",
        validation_alias=AliasChoices("environment", "APP_ENV", "NODE_ENV"),
    )

    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("output")
    static_dir: Path = Path(__file__).resolve().parent.parent / "static"

    accepted_mime_type: str = "application/pdf"
    max_file_size_mb: int = 10

    upload_retention_seconds: float = 1.0
    output_retention_seconds: float = 120.0
    request_timeout_seconds: float = 30.0

    cors_origins_raw: str = Field(
        default="*",
        validation_alias=AliasChoices("cors_origins_raw", "CORS_ORIGINS"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("max_file_size_mb")
    @classmethod
    def _validate_max_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_FILE_SIZE_MB must be positive")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        return v

    @field_validator("upload_retention_seconds", "output_retention_seconds")
    @classmethod
    def _validate_retention(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retention delays cannot be negative")
        return v

    @field_validator("environment")
    @classmethod
    def _normalise_environment(cls, v: str) -> str:
        return v.strip().lower() or "production"

    @property
    def is_development(self) -> bool:
        """True when error details may be shown to clients."""
        return self.debug or self.environment == "development"

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins(self) -> List[str]:
        return _parse_csv_str(self.cors_origins_raw)

    def ensure_directories(self) -> None:
        """Create the upload and output directories if they are missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Public accessor – manual caching to support special behaviour in tests
_CACHED_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:  # noqa: D401 – accessor helper
    """Return a **singleton** Settings instance unless running under pytest.

    Tests manipulate the environment through ``monkeypatch`` and expect every
    call made while ``PYTEST_CURRENT_TEST`` is set to observe those changes,
    so caching is skipped in that case.
    """

    global _CACHED_SETTINGS  # noqa: PLW0603 – module-level singleton

    if "PYTEST_CURRENT_TEST" in os.environ:
        return Settings()

    if _CACHED_SETTINGS is None:
        _CACHED_SETTINGS = Settings()

    return _CACHED_SETTINGS


def _clear_settings_cache() -> None:  # noqa: D401 – helper for tests
    """Clear the internal Settings singleton (used by unit-tests)."""

    global _CACHED_SETTINGS
    _CACHED_SETTINGS = None


get_settings.cache_clear = _clear_settings_cache  # type: ignore[attr-defined]
