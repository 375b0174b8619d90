from __future__ import annotations

import os
import re
import time
from pathlib import Path
from typing import BinaryIO, Final, Iterator

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from pdf2word.api.state import get_retention_manager
from pdf2word.core.config import Settings, get_settings
from pdf2word.core.exceptions import NotFoundError, ValidationError
from pdf2word.retention import RetentionManager

__all__: list[str] = [
    "router",
    "DOCX_MEDIA_TYPE",
]

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["conversion"])

DOCX_MEDIA_TYPE: Final[str] = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# Only names produced by the pipeline are served; nothing else in the output
# directory (or outside it) is reachable.
_DOWNLOAD_NAME: Final[re.Pattern[str]] = re.compile(r"converted-\d+\.docx")

SETTINGS_DEP: Settings = Depends(get_settings)
RETENTION_DEP: RetentionManager = Depends(get_retention_manager)

_CHUNK_SIZE: Final[int] = 64 * 1024


def _open_document(path: Path) -> BinaryIO:
    return path.open("rb")


def _iter_handle(handle: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = handle.read(_CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


async def _after_download(
    handle: BinaryIO, retention: RetentionManager, path: Path, delay_seconds: float
) -> None:
    handle.close()
    logger.info("download_completed", filename=path.name)
    retention.schedule_delete(path, delay_seconds)


@router.get("/download/{filename}", summary="Download a converted document.")
async def download_document(
    filename: str,
    settings: Settings = SETTINGS_DEP,
    retention: RetentionManager = RETENTION_DEP,
) -> StreamingResponse:
    """Stream a converted document, then schedule its deletion.

    Repeat downloads keep working until the retention timer fires. The file is
    opened before the response starts, so a timer firing mid-transfer cannot
    truncate it: the open handle keeps the unlinked content readable.
    """
    if not _DOWNLOAD_NAME.fullmatch(filename):
        logger.warning("download_rejected", filename=filename)
        raise ValidationError("Invalid filename")

    path = settings.output_dir / filename
    try:
        handle = _open_document(path)
    except (FileNotFoundError, IsADirectoryError) as e:
        logger.info("download_not_found", filename=filename)
        raise NotFoundError("File not found") from e

    size = os.fstat(handle.fileno()).st_size
    download_name = f"converted-document-{int(time.time() * 1000)}.docx"
    return StreamingResponse(
        _iter_handle(handle),
        media_type=DOCX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{download_name}"',
            "Content-Length": str(size),
        },
        background=BackgroundTask(
            _after_download,
            handle,
            retention,
            path,
            settings.output_retention_seconds,
        ),
    )
