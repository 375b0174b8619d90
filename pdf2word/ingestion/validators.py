from __future__ import annotations

import os
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import structlog
from starlette.datastructures import UploadFile

from pdf2word.core.config import Settings, get_settings
from pdf2word.core.exceptions import ValidationError
from pdf2word.ingestion.streamers import save_upload

__all__: list[str] = ["UPLOAD_FIELD", "UploadedFile", "validate_upload", "admit_upload"]

logger = structlog.get_logger(__name__)

UPLOAD_FIELD = "pdfFile"

_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass(frozen=True)
class UploadedFile:
    """An upload that passed validation and now lives in the upload directory."""

    temp_path: Path
    original_filename: str
    content_type: str
    size_bytes: int


def _select_single(files: Optional[Sequence[UploadFile]]) -> UploadFile:
    """Ensure exactly one non-empty file part was submitted."""
    uploads = [f for f in (files or []) if f is not None and f.filename]
    if not uploads:
        logger.warning("upload_rejected", reason="missing_file")
        raise ValidationError("No file uploaded")
    if len(uploads) > 1:
        logger.warning("upload_rejected", reason="too_many_files", count=len(uploads))
        raise ValidationError("Only one file may be uploaded at a time")
    return uploads[0]


def _validate_mime(file: UploadFile, settings: Settings) -> None:
    """Only the declared content type is checked; the bytes are not sniffed."""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type != settings.accepted_mime_type:
        logger.warning(
            "upload_rejected",
            reason="unsupported_mime",
            content_type=file.content_type,
            filename=file.filename,
        )
        raise ValidationError(
            "Only PDF files are allowed!",
            details=f"Received content type {file.content_type or 'unknown'}.",
        )


def _measure_size(file: UploadFile) -> int:
    """Return the upload size without consuming the stream."""
    try:
        current_pos = file.file.tell()
        file.file.seek(0, 2)
        size = file.file.tell()
        file.file.seek(current_pos)
    except OSError as e:
        logger.error("upload_size_check_failed", error=str(e), filename=file.filename)
        raise ValidationError(
            "Unable to assess uploaded file size. The upload may be corrupted."
        ) from e
    return size


def _validate_size(size: int, filename: Optional[str], settings: Settings) -> None:
    if size > settings.max_file_size_bytes:
        logger.warning(
            "upload_rejected",
            reason="too_large",
            size=size,
            max_size=settings.max_file_size_bytes,
            filename=filename,
        )
        raise ValidationError(
            f"File too large. Maximum size is {settings.max_file_size_mb}MB."
        )


def validate_upload(
    files: Optional[Sequence[UploadFile]],
    *,
    settings: Optional[Settings] = None,
) -> UploadFile:
    """
    Check a submission against the upload rules and return the admitted file.

    Rejects, with :class:`ValidationError`:
    - a submission without any file (or with an empty filename)
    - more than one file
    - a declared MIME type other than the accepted document type
    - a file larger than the configured ceiling
    """
    settings = settings or get_settings()

    upload = _select_single(files)
    _validate_mime(upload, settings)
    size = _measure_size(upload)
    _validate_size(size, upload.filename, settings)

    logger.debug(
        "upload_validation_passed",
        filename=upload.filename,
        size_bytes=size,
        content_type=upload.content_type,
    )
    return upload


def _temp_name(field_name: str, original_filename: str) -> str:
    """``<field>-<ms timestamp>-<random>.<ext>``."""
    _, extension = os.path.splitext(original_filename)
    extension = extension.lower()
    if not _SAFE_EXTENSION.match(extension):
        extension = ""
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field_name}-{suffix}{extension}"


async def admit_upload(
    files: Optional[Sequence[UploadFile]],
    *,
    settings: Optional[Settings] = None,
) -> UploadedFile:
    """Validate the submission and persist it to the upload directory."""
    settings = settings or get_settings()
    upload = validate_upload(files, settings=settings)
    original_filename = upload.filename or "upload.pdf"

    destination = settings.upload_dir / _temp_name(
        UPLOAD_FIELD, original_filename
    )
    try:
        size = await save_upload(
            upload, destination, max_bytes=settings.max_file_size_bytes
        )
    except BaseException:
        destination.unlink(missing_ok=True)
        raise

    admitted = UploadedFile(
        temp_path=destination,
        original_filename=original_filename,
        content_type=upload.content_type or settings.accepted_mime_type,
        size_bytes=size,
    )
    logger.info(
        "upload_admitted",
        filename=original_filename,
        temp_path=str(destination),
        size_bytes=size,
    )
    return admitted
