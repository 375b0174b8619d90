from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pdf2word.core.config import Settings, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("UPLOAD_DIR", "OUTPUT_DIR", "UPLOAD_RETENTION_SECONDS", "OUTPUT_RETENTION_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.port == 3000
    assert settings.environment == "production"
    assert settings.is_development is False
    assert settings.max_file_size_bytes == 10 * 1024 * 1024
    assert settings.accepted_mime_type == "application/pdf"
    assert settings.upload_dir == Path("uploads")
    assert settings.output_dir == Path("output")
    assert settings.upload_retention_seconds == 1.0
    assert settings.output_retention_seconds == 120.0
    assert settings.request_timeout_seconds == 30.0
    assert settings.cors_origins == ["*"]


def test_port_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")

    assert Settings().port == 8080


@pytest.mark.parametrize("variable", ["APP_ENV", "NODE_ENV"])
def test_development_mode_from_environment(
    monkeypatch: pytest.MonkeyPatch, variable: str
) -> None:
    monkeypatch.setenv(variable, "Development")

    settings = Settings()

    assert settings.environment == "development"
    assert settings.is_development is True


def test_debug_implies_development() -> None:
    assert Settings(debug=True).is_development is True


def test_cors_origins_are_comma_separated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

    assert Settings().cors_origins == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_file_size_mb": 0},
        {"request_timeout_seconds": 0},
        {"upload_retention_seconds": -1},
        {"output_retention_seconds": -0.5},
    ],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_ensure_directories(tmp_path: Path) -> None:
    settings = Settings(upload_dir=tmp_path / "in" / "nested", output_dir=tmp_path / "out")

    settings.ensure_directories()

    assert settings.upload_dir.is_dir()
    assert settings.output_dir.is_dir()


def test_get_settings_is_fresh_under_pytest(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("PORT", "9999")

    assert get_settings() is not first
    assert get_settings().port == 9999


def test_get_settings_caches_outside_pytest(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()  # type: ignore[attr-defined]
