"""PDF to Word conversion: normalisation, document assembly and orchestration."""

from __future__ import annotations

from .builder import build_document, write_document
from .normalizer import EMPTY_TEXT_PLACEHOLDER, normalize_text
from .pipeline import ConversionPipeline, ConversionResult, ConversionStage

__all__: list[str] = [
    "ConversionPipeline",
    "ConversionResult",
    "ConversionStage",
    "EMPTY_TEXT_PLACEHOLDER",
    "build_document",
    "normalize_text",
    "write_document",
]
