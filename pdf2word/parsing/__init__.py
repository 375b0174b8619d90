"""pdf2word/parsing/__init__.py
###############################################################################
Text-extraction adapters.
###############################################################################
Extractors are **asynchronous**: the CPU-bound parsing runs in a worker thread
via `asyncio.to_thread()` so the event loop keeps serving other requests.
They return *raw* text; cleanup belongs to
:pymod:`pdf2word.conversion.normalizer`.
"""

from __future__ import annotations

from .pdf import EXTRACTION_FAILED_PLACEHOLDER, extract_text_from_pdf

__all__: list[str] = [
    "EXTRACTION_FAILED_PLACEHOLDER",
    "extract_text_from_pdf",
]
