from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import pytest

from pdf2word.core.exceptions import ValidationError
from pdf2word.ingestion.streamers import DEFAULT_CHUNK_SIZE, save_upload, stream_file
from tests.conftest import build_upload


def test_stream_multiple_chunks_residue() -> None:
    """Generator yields N full-sized chunks plus a final residue chunk."""

    payload: bytes = b"b" * ((DEFAULT_CHUNK_SIZE * 2) + 17)
    upload_file = build_upload("data.pdf", payload)

    async def _collect() -> List[bytes]:
        return [chunk async for chunk in stream_file(upload_file)]

    chunks: List[bytes] = asyncio.run(_collect())

    assert len(chunks) == 3
    assert len(chunks[-1]) == 17
    assert b"".join(chunks) == payload


def test_stream_rewinds_before_reading() -> None:
    upload_file = build_upload("data.pdf", b"abcdef")
    upload_file.file.seek(4)

    async def _collect() -> bytes:
        return b"".join([chunk async for chunk in stream_file(upload_file)])

    assert asyncio.run(_collect()) == b"abcdef"


def test_invalid_chunk_size_raises() -> None:
    """Non-positive sizes must raise a ValueError immediately."""

    upload_file = build_upload("data.pdf", b"irrelevant")

    async def _iter() -> None:
        async for _ in stream_file(upload_file, chunk_size=0):
            pass

    with pytest.raises(ValueError):
        asyncio.run(_iter())


@pytest.mark.asyncio
async def test_save_upload_writes_everything(tmp_path: Path) -> None:
    payload = b"x" * (DEFAULT_CHUNK_SIZE + 5)
    destination = tmp_path / "copy.pdf"

    written = await save_upload(build_upload("data.pdf", payload), destination)

    assert written == len(payload)
    assert destination.read_bytes() == payload


@pytest.mark.asyncio
async def test_save_upload_stops_past_the_ceiling(tmp_path: Path) -> None:
    destination = tmp_path / "copy.pdf"
    upload = build_upload("data.pdf", b"x" * (1024 * 1024 + 1))

    with pytest.raises(ValidationError, match="Maximum size is 1MB"):
        await save_upload(
            upload, destination, max_bytes=1024 * 1024, chunk_size=1024
        )

    # The partial copy is left for the caller to remove.
    assert destination.stat().st_size <= 1024 * 1024
