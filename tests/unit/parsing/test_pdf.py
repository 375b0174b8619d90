from __future__ import annotations

from unittest.mock import patch

import pytest

from pdf2word.parsing.pdf import EXTRACTION_FAILED_PLACEHOLDER, extract_text_from_pdf
from tests.conftest import make_pdf


@pytest.mark.asyncio
async def test_extracts_text_from_every_page_line() -> None:
    text = await extract_text_from_pdf(make_pdf(["Hello", "World"]))

    assert "Hello" in text
    assert "World" in text
    assert text.index("Hello") < text.index("World")


@pytest.mark.asyncio
async def test_library_error_becomes_placeholder() -> None:
    with patch(
        "pdf2word.parsing.pdf.extract_text", side_effect=RuntimeError("boom")
    ):
        text = await extract_text_from_pdf(b"%PDF-1.4 whatever")

    assert text == f"{EXTRACTION_FAILED_PLACEHOLDER} (boom)"


@pytest.mark.asyncio
async def test_error_without_message_uses_exception_name() -> None:
    with patch("pdf2word.parsing.pdf.extract_text", side_effect=KeyError()):
        text = await extract_text_from_pdf(b"%PDF-1.4")

    assert text.startswith(EXTRACTION_FAILED_PLACEHOLDER)
    assert text.endswith("(KeyError)")


@pytest.mark.asyncio
async def test_garbage_bytes_do_not_raise() -> None:
    text = await extract_text_from_pdf(b"this is definitely not a pdf")

    assert isinstance(text, str)


@pytest.mark.asyncio
async def test_none_result_is_empty_string() -> None:
    with patch("pdf2word.parsing.pdf.extract_text", return_value=None):
        assert await extract_text_from_pdf(b"%PDF-1.4") == ""
