# ruff: noqa: E402
from __future__ import annotations

import sys
from pathlib import Path

# Ensure repository root is first on sys.path
_repo_root: Path = Path(__file__).resolve().parent.parent  # tests/ -> repo root
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from io import BytesIO
from typing import Iterator, Sequence

import pytest
from starlette.datastructures import Headers, UploadFile

from pdf2word.core.config import Settings


def make_pdf(lines: Sequence[str]) -> bytes:
    """Return a minimal single-page PDF showing **lines** in Helvetica."""

    operations = ["BT", "/F1 12 Tf", "16 TL", "72 720 Td"]
    for index, line in enumerate(lines):
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        operations.append(f"({escaped}) Tj" if index == 0 else f"T* ({escaped}) Tj")
    operations.append("ET")
    content = "\n".join(operations).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
    ]

    pdf = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += b"xref\n0 %d\n" % (len(objects) + 1)
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += b"%010d 00000 n \n" % offset
    pdf += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(pdf)


def build_upload(
    filename: str | None,
    payload: bytes,
    content_type: str = "application/pdf",
) -> UploadFile:
    """Return a Starlette *UploadFile* wrapping **payload**."""
    return UploadFile(
        file=BytesIO(payload),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf(["Hello", "World"])


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Point the service at per-test directories and ignore any *.env* file.

    Uploads are deleted inline (zero retention) unless a test overrides it,
    so assertions about cleanup do not depend on timers.
    """

    monkeypatch.setitem(Settings.model_config, "env_file", None)
    for name in ("APP_ENV", "NODE_ENV", "ENVIRONMENT", "DEBUG", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("UPLOAD_RETENTION_SECONDS", "0")
    monkeypatch.setenv("OUTPUT_RETENTION_SECONDS", "120")


@pytest.fixture
def settings() -> Settings:
    """Settings read from the isolated environment, directories created."""
    current = Settings()
    current.ensure_directories()
    return current


@pytest.fixture
def client() -> Iterator["TestClient"]:
    """TestClient running startup/shutdown hooks around each test."""
    from fastapi.testclient import TestClient

    from pdf2word.api.app import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
