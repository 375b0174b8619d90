from __future__ import annotations

import asyncio
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from pdf2word.api.state import ServiceState, get_pipeline, get_service_state
from pdf2word.conversion.pipeline import ConversionPipeline
from pdf2word.core.config import Settings, get_settings
from pdf2word.core.exceptions import ConversionTimeoutError, ServiceUnavailableError
from pdf2word.ingestion.validators import UPLOAD_FIELD

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["conversion"])

FILE_PARAM: Optional[List[UploadFile]] = File(
    None, alias=UPLOAD_FIELD, description="The PDF document to convert"
)
SETTINGS_DEP: Settings = Depends(get_settings)
PIPELINE_DEP: ConversionPipeline = Depends(get_pipeline)
STATE_DEP: ServiceState = Depends(get_service_state)


@router.post(
    "/convert",
    summary="Convert an uploaded PDF into a Word document.",
    response_model=None,
    status_code=status.HTTP_200_OK,
)
async def convert_pdf(
    pdf_file: Optional[List[UploadFile]] = FILE_PARAM,
    settings: Settings = SETTINGS_DEP,
    pipeline: ConversionPipeline = PIPELINE_DEP,
    service_state: ServiceState = STATE_DEP,
) -> JSONResponse:
    """
    Run the conversion pipeline for the multipart field ``pdfFile``.

    Returns ``{success, message, downloadUrl, originalName}``. Validation
    problems answer 400, document write failures 500, and a conversion that
    outlives the request ceiling 504.
    """
    if not service_state.ready:
        logger.warning("convert_rejected_not_ready")
        raise ServiceUnavailableError("Server is shutting down")

    try:
        result = await asyncio.wait_for(
            pipeline.run(pdf_file), timeout=settings.request_timeout_seconds
        )
    except asyncio.TimeoutError as e:
        logger.error(
            "conversion_timed_out", timeout_seconds=settings.request_timeout_seconds
        )
        raise ConversionTimeoutError(
            "Conversion timed out",
            details=f"No result after {settings.request_timeout_seconds:g} seconds.",
        ) from e

    return JSONResponse(content=result.to_response(), status_code=status.HTTP_200_OK)
