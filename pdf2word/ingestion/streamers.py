"""Move upload bytes from the multipart spool to the upload directory."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Final, Optional

import structlog
from starlette.datastructures import UploadFile

from pdf2word.core.exceptions import ValidationError

__all__: list[str] = ["stream_file", "save_upload"]

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024


async def stream_file(
    file: UploadFile,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Yield the upload from its first byte in *chunk_size* pieces.

    The size check in the validators leaves the cursor at an arbitrary
    position, so the file is rewound first.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be greater than 0")

    await file.seek(0)
    while True:
        chunk: bytes = await file.read(chunk_size)
        if not chunk:
            return
        yield chunk


def _write_chunk(handle: BinaryIO, chunk: bytes) -> None:
    handle.write(chunk)


async def save_upload(
    file: UploadFile,
    destination: Path,
    *,
    max_bytes: Optional[int] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Copy **file** to **destination** and return the number of bytes written.

    Disk writes run in a worker thread. When *max_bytes* is given the copy is
    abandoned with :class:`ValidationError` as soon as it is exceeded; the
    caller owns removal of the partial file.
    """

    written = 0
    # Opened on the loop: the file exists before the first cancellable await.
    handle: BinaryIO = destination.open("wb")
    try:
        async for chunk in stream_file(file, chunk_size=chunk_size):
            written += len(chunk)
            if max_bytes is not None and written > max_bytes:
                logger.warning(
                    "upload_rejected",
                    reason="too_large",
                    size=written,
                    max_size=max_bytes,
                    filename=file.filename,
                )
                raise ValidationError(
                    f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
                )
            await asyncio.to_thread(_write_chunk, handle, chunk)
    finally:
        await asyncio.to_thread(handle.close)

    logger.debug("upload_saved", path=destination, size_bytes=written)
    return written
