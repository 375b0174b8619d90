from __future__ import annotations

import re
from typing import Any, Final

__all__: list[str] = ["normalize_text", "EMPTY_TEXT_PLACEHOLDER"]

EMPTY_TEXT_PLACEHOLDER: Final[str] = (
    "No readable text content. "
    "The document appears to be empty or contains only images."
)

# pdfminer separates pages with form feeds; treat them like line breaks.
_LINE_BREAKS = re.compile(r"\r\n|[\r\f\v]")
_HORIZONTAL_RUNS = re.compile(r"[^\S\n]{2,}")
_BLANK_LINE_RUNS = re.compile(r"\n{3,}")


def normalize_text(text: Any) -> str:
    """Clean raw extracted text for document assembly.

    Line breaks are unified to ``\\n``, runs of spaces/tabs collapse to one
    space, every line is trimmed and more than one consecutive blank line
    collapses to a single blank line. The result is never empty: input that
    is missing, not a string or blank yields :data:`EMPTY_TEXT_PLACEHOLDER`.
    """
    if not isinstance(text, str):
        return EMPTY_TEXT_PLACEHOLDER

    cleaned = _LINE_BREAKS.sub("\n", text)
    cleaned = _HORIZONTAL_RUNS.sub(" ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    cleaned = _BLANK_LINE_RUNS.sub("\n\n", cleaned).strip()

    return cleaned or EMPTY_TEXT_PLACEHOLDER
