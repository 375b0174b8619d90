"""pdf2word/conversion/builder.py
###############################################################################
Word document assembly using python-docx
###############################################################################
Turns normalised text into a small ``.docx``: a centred title, an italic line
naming the source file, a spacer, then one paragraph per line of text.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import Final

import structlog
from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.section import WD_ORIENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from pdf2word.core.exceptions import DocumentWriteError

__all__: list[str] = ["build_document", "write_document"]

logger = structlog.get_logger(__name__)

DOCUMENT_TITLE: Final[str] = "Document Converted from PDF"
TITLE_COLOR: Final[RGBColor] = RGBColor(0x2F, 0x54, 0x96)
SUBTITLE_COLOR: Final[RGBColor] = RGBColor(0x7F, 0x7F, 0x7F)

# Characters that cannot appear in WordprocessingML text nodes.
_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _xml_safe(value: str) -> str:
    return _XML_INVALID.sub("", value)


def _apply_layout(document: DocumentObject) -> None:
    props = document.core_properties
    props.title = "Converted from PDF"
    props.subject = "PDF to Word Conversion"
    props.keywords = "pdf, word, conversion"

    for section in document.sections:
        section.orientation = WD_ORIENT.PORTRAIT
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


def build_document(text: str, original_filename: str) -> DocumentObject:
    """Assemble the output document in memory.

    Blank lines in **text** become empty paragraphs so the block structure of
    the source survives; every other line becomes its own paragraph, in order.
    """
    document = Document()
    _apply_layout(document)

    title = document.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run(DOCUMENT_TITLE)
    run.bold = True
    run.font.size = Pt(18)
    run.font.color.rgb = TITLE_COLOR

    subtitle = document.add_paragraph()
    subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = subtitle.add_run(f"Original file: {_xml_safe(original_filename)}")
    run.italic = True
    run.font.size = Pt(12)
    run.font.color.rgb = SUBTITLE_COLOR

    # spacer
    document.add_paragraph()

    for line in _xml_safe(text).split("\n"):
        line = line.strip()
        if not line:
            document.add_paragraph()
            continue
        paragraph = document.add_paragraph()
        paragraph.add_run(line).font.size = Pt(11)

    return document


def _save(document: DocumentObject, path: Path) -> None:
    # Readers must never observe a half-written file under the final name.
    partial = path.with_name(f"{path.name}.part")
    try:
        document.save(str(partial))
        os.replace(partial, path)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise


async def write_document(document: DocumentObject, path: Path) -> Path:
    """Serialise **document** to **path** in a worker thread."""
    try:
        await asyncio.to_thread(_save, document, path)
    except (OSError, ValueError) as e:
        logger.error("document_write_failed", path=str(path), error=str(e))
        raise DocumentWriteError(
            "Failed to create Word document", details=str(e)
        ) from e

    logger.info("document_written", path=str(path))
    return path

