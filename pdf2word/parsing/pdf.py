from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Final

import structlog
from pdfminer.high_level import extract_text

from pdf2word.core.exceptions import ExtractionFailure

__all__: list[str] = ["extract_text_from_pdf", "EXTRACTION_FAILED_PLACEHOLDER"]

logger = structlog.get_logger(__name__)

EXTRACTION_FAILED_PLACEHOLDER: Final[str] = (
    "Error: Could not extract text from PDF. "
    "The file may be image-based or corrupted."
)


def _extract(pdf_content: bytes) -> str:
    try:
        return extract_text(BytesIO(pdf_content)) or ""
    except Exception as e:  # pdfminer raises a wide range of parser errors
        raise ExtractionFailure(str(e) or e.__class__.__name__) from e


async def extract_text_from_pdf(content: bytes) -> str:
    """
    Extract the text of every page of a PDF using pdfminer.six.

    Extraction failures are not raised. The caller receives a placeholder
    sentence that names the reason, so an image-only or broken PDF still
    yields a document.

    Args:
        content: Raw PDF bytes

    Returns:
        Extracted text (possibly empty) or the failure placeholder
    """
    try:
        text = await asyncio.to_thread(_extract, content)
    except ExtractionFailure as e:
        logger.warning("pdf_extraction_failed", error=str(e), size_bytes=len(content))
        return f"{EXTRACTION_FAILED_PLACEHOLDER} ({e})"

    logger.debug("pdf_extraction_succeeded", characters=len(text))
    return text
