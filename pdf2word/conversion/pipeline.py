"""pdf2word/conversion/pipeline.py
###############################################################################
Conversion orchestrator
###############################################################################
Runs one upload through the pipeline::

    RECEIVED → VALIDATED → EXTRACTED → NORMALIZED → BUILT → PERSISTED → RESPONDED

``FAILED`` is reachable from validation, document writing, or any unexpected
error. Extraction problems never fail a run; the extraction adapter turns
them into placeholder text.

Whatever the outcome, the temporary upload is handed to the
:class:`~pdf2word.retention.RetentionManager` from a ``finally`` block. A run
that stops before RESPONDED (failure or cancellation by the request timeout)
also schedules removal of any output it may have produced.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import UploadFile

from pdf2word.conversion.builder import build_document, write_document
from pdf2word.conversion.normalizer import normalize_text
from pdf2word.core.config import Settings
from pdf2word.core.exceptions import ConversionError, InternalError
from pdf2word.ingestion.validators import UploadedFile, admit_upload
from pdf2word.parsing.pdf import extract_text_from_pdf
from pdf2word.retention import RetentionManager

__all__: list[str] = [
    "ConversionStage",
    "ConversionResult",
    "ConversionPipeline",
    "output_filename",
    "DOWNLOAD_PREFIX",
]

logger = structlog.get_logger(__name__)

DOWNLOAD_PREFIX = "/download/"


class ConversionStage(str, Enum):
    """States of a single conversion run."""

    received = "received"
    validated = "validated"
    extracted = "extracted"
    normalized = "normalized"
    built = "built"
    persisted = "persisted"
    responded = "responded"
    failed = "failed"


class ConversionResult(BaseModel):
    """Response payload of a conversion. Serialised with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    success: bool
    message: str
    download_url: Optional[str] = Field(default=None, alias="downloadUrl")
    original_name: Optional[str] = Field(default=None, alias="originalName")

    def to_response(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)


def output_filename() -> str:
    """``converted-<ms timestamp><6 random digits>.docx``."""
    return f"converted-{int(time.time() * 1000)}{random.randint(0, 999_999):06d}.docx"


@dataclass
class _Run:
    stage: ConversionStage = ConversionStage.received
    upload: Optional[UploadedFile] = None
    output_path: Optional[Path] = None

    def advance(self, stage: ConversionStage, **event: object) -> None:
        self.stage = stage
        logger.info("conversion_stage", stage=stage.value, **event)


class ConversionPipeline:
    """Sequences gatekeeper, extraction, normalisation and document writing."""

    def __init__(self, settings: Settings, retention: RetentionManager) -> None:
        self.settings = settings
        self.retention = retention

    async def run(self, files: Optional[Sequence[UploadFile]]) -> ConversionResult:
        run = _Run()
        try:
            return await self._convert(run, files)
        except ConversionError as e:
            run.advance(ConversionStage.failed, error=e.message, status_code=e.status_code)
            raise
        except asyncio.CancelledError:
            logger.warning("conversion_cancelled", stage=run.stage.value)
            raise
        except Exception as e:
            logger.exception("conversion_internal_error", stage=run.stage.value)
            run.advance(ConversionStage.failed, error=str(e), status_code=500)
            raise InternalError("Failed to convert PDF to Word", details=str(e)) from e
        finally:
            self._cleanup(run)

    async def _convert(
        self, run: _Run, files: Optional[Sequence[UploadFile]]
    ) -> ConversionResult:
        upload = await admit_upload(files, settings=self.settings)
        run.upload = upload
        run.advance(ConversionStage.validated, filename=upload.original_filename)

        content = await asyncio.to_thread(upload.temp_path.read_bytes)
        raw_text = await extract_text_from_pdf(content)
        run.advance(ConversionStage.extracted, characters=len(raw_text))

        text = normalize_text(raw_text)
        run.advance(ConversionStage.normalized, characters=len(text))

        name = output_filename()
        run.output_path = self.settings.output_dir / name
        document = await asyncio.to_thread(
            build_document, text, upload.original_filename
        )
        run.advance(ConversionStage.built, output=name)
        await write_document(document, run.output_path)
        run.advance(ConversionStage.persisted, output=name)

        result = ConversionResult(
            success=True,
            message="PDF converted successfully",
            download_url=f"{DOWNLOAD_PREFIX}{name}",
            original_name=upload.original_filename,
        )
        run.advance(ConversionStage.responded, download_url=result.download_url)
        return result

    def _cleanup(self, run: _Run) -> None:
        if run.upload is not None:
            self.retention.schedule_delete(
                run.upload.temp_path, self.settings.upload_retention_seconds
            )
        # A cancelled write may still land on disk after this point, so the
        # longer output delay is used rather than deleting right away.
        if run.stage is not ConversionStage.responded and run.output_path is not None:
            self.retention.schedule_delete(
                run.output_path, self.settings.output_retention_seconds
            )
