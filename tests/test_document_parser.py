"""Tests for text extraction across plain text, PDF, DOCX and images."""
import io

import fitz
import pytest
from docx import Document as DocxDocument
from PIL import Image

from papergen.exceptions import (
    ExtractionFailure,
    FileTooLargeError,
    LegacyWordFormatError,
    UnsupportedFormatError,
)
from papergen.services.document_parser import (
    NO_TEXT_PLACEHOLDER,
    DocumentParser,
    UploadedFile,
)
from papergen.services.format_classifier import DOCX_MEDIA_TYPE
from tests.helpers import FakeGemini, gemini_response


def _pdf_bytes(*pages) -> bytes:
    """One PDF page per argument, each a list of lines drawn top to bottom."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((72, 72 + 20 * i), line)
    data = doc.tobytes()
    doc.close()
    return data


def _docx_bytes(paragraphs, table_rows=None) -> bytes:
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    if table_rows:
        table = doc.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def parser(gemini_client) -> DocumentParser:
    return DocumentParser(gemini_client)


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_plain_text_is_decoded_as_utf8(parser):
    upload = UploadedFile("notes.txt", "text/plain", "Café notes\nline two".encode("utf-8"))
    result = await parser.extract(upload)
    assert result.text == "Café notes\nline two"
    assert result.warnings == []


@pytest.mark.asyncio
async def test_invalid_utf8_is_replaced_with_warning(parser):
    upload = UploadedFile("bad.txt", "text/plain", b"abc\xff\xfedef")
    result = await parser.extract(upload)
    assert result.text.startswith("abc") and result.text.endswith("def")
    assert "\ufffd" in result.text
    assert len(result.warnings) == 1


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pdf_text_layer_is_extracted(parser):
    upload = UploadedFile(
        "paper.pdf",
        "application/pdf",
        _pdf_bytes(["Hello PDF", "Second line"], ["Page two"]),
    )
    result = await parser.extract(upload)
    assert result.text == "Hello PDF Second line\n\nPage two"
    assert not result.is_empty


@pytest.mark.asyncio
async def test_pdf_pages_without_text_are_skipped(parser):
    upload = UploadedFile(
        "mixed.pdf",
        "application/pdf",
        _pdf_bytes(["First page"], [], ["Third page"]),
    )
    result = await parser.extract(upload)
    assert result.text == "First page\n\nThird page"


@pytest.mark.asyncio
async def test_pdf_without_text_yields_warning(parser):
    upload = UploadedFile("scan.pdf", "application/pdf", _pdf_bytes([]))
    result = await parser.extract(upload)
    assert result.text == ""
    assert result.is_empty
    assert "No extractable text" in result.warnings[0]


@pytest.mark.asyncio
async def test_corrupt_pdf_raises(parser):
    upload = UploadedFile("broken.pdf", "application/pdf", b"%PDF-not really")
    with pytest.raises(ExtractionFailure):
        await parser.extract(upload)


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_docx_paragraphs_and_tables_in_order(parser):
    data = _docx_bytes(
        ["Introduction", "", "Body text."],
        table_rows=[["Metric", "Value"], ["Accuracy", "0.93"]],
    )
    result = await parser.extract(UploadedFile("paper.docx", DOCX_MEDIA_TYPE, data))

    assert result.text == "Introduction\n\nBody text.\n\nMetric | Value\nAccuracy | 0.93"
    assert result.warnings == []


@pytest.mark.asyncio
async def test_empty_docx_yields_warning(parser):
    result = await parser.extract(UploadedFile("empty.docx", DOCX_MEDIA_TYPE, _docx_bytes([])))
    assert result.text == ""
    assert result.warnings == ["The DOCX file contains no text."]


@pytest.mark.asyncio
async def test_corrupt_docx_raises(parser):
    with pytest.raises(ExtractionFailure):
        await parser.extract(UploadedFile("broken.docx", DOCX_MEDIA_TYPE, b"PK\x03\x04junk"))


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_image_is_transcribed_by_generation_api(parser, fake_gemini: FakeGemini):
    fake_gemini.queue(gemini_response("Figure 1: Results"))
    upload = UploadedFile("photo.jpg", "image/jpg", _png_bytes())

    result = await parser.extract(upload, api_key="user-key")

    assert result.text == "Figure 1: Results"
    assert len(fake_gemini.requests) == 1
    assert fake_gemini.requests[0].url.params["key"] == "user-key"
    inline = fake_gemini.bodies()[0]["contents"][0]["parts"][1]["inline_data"]
    assert inline["mime_type"] == "image/jpeg"


@pytest.mark.asyncio
async def test_image_without_text_returns_placeholder(parser, fake_gemini: FakeGemini):
    fake_gemini.queue(gemini_response("   "))
    result = await parser.extract(UploadedFile("blank.png", "image/png", _png_bytes()), api_key="k")
    assert result.text == NO_TEXT_PLACEHOLDER
    assert result.warnings == ["No text was detected in the image."]
    assert result.placeholder
    assert result.is_empty


@pytest.mark.asyncio
async def test_corrupt_image_is_rejected_before_any_request(parser, fake_gemini: FakeGemini):
    with pytest.raises(ExtractionFailure):
        await parser.extract(UploadedFile("x.png", "image/png", b"not an image"), api_key="k")
    assert fake_gemini.requests == []


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_legacy_word_is_rejected(parser, fake_gemini: FakeGemini):
    with pytest.raises(LegacyWordFormatError):
        await parser.extract(UploadedFile("old.doc", "application/msword", b"\xd0\xcf\x11\xe0"))
    assert fake_gemini.requests == []


@pytest.mark.asyncio
async def test_unknown_type_is_rejected(parser):
    with pytest.raises(UnsupportedFormatError):
        await parser.extract(UploadedFile("a.zip", "application/zip", b"PK"))


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(parser):
    with pytest.raises(FileTooLargeError):
        await parser.extract(UploadedFile("big.txt", "text/plain", b"x" * 11), max_size=10)
