"""
Text extraction for uploaded files: plain text, PDF, DOCX and images.

Each extractor turns the raw bytes of one upload into an ExtractionResult
(plain text + warnings). Text only: formatting is discarded because the
result becomes model input, not final output. Well-formed but textless input
yields an empty string and a warning; corrupt input raises ExtractionFailure.
"""
from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

import fitz  # PyMuPDF
from docx import Document as DocxDocument
from docx.table import Table
from PIL import Image, UnidentifiedImageError

from papergen.config import settings
from papergen.exceptions import ExtractionFailure, FileTooLargeError
from papergen.services.format_classifier import ExtractionStrategy, ensure_supported
from papergen.services.generation_client import GeminiClient

logger = logging.getLogger(__name__)

NO_TEXT_PLACEHOLDER = (
    "[No readable text was detected in the uploaded image. "
    "Type or paste the content manually.]"
)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadedFile:
    """A file as selected by the user. Read once, then discarded."""

    name: str
    media_type: str
    data: bytes = field(repr=False)

    @property
    def byte_size(self) -> int:
        return len(self.data)


@dataclass
class ExtractionResult:
    """
    Output of an extractor.

    Attributes:
        text:     Extracted plain text; "" is a valid result, not a failure.
        warnings: Ordered, human-readable notes (e.g. "no text layer found").
        placeholder: True when ``text`` is a stand-in message rather than
                     content read from the file.
    """

    text: str
    warnings: List[str] = field(default_factory=list)
    placeholder: bool = False

    @property
    def is_empty(self) -> bool:
        return self.placeholder or not self.text.strip()


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

class TextExtractor(ABC):
    """One extraction strategy bound to one format."""

    @abstractmethod
    async def extract(self, data: bytes) -> ExtractionResult:
        """Return the text of *data*; raise ExtractionFailure if it is corrupt."""


class PlainTextExtractor(TextExtractor):
    async def extract(self, data: bytes) -> ExtractionResult:
        try:
            return ExtractionResult(text=data.decode("utf-8"))
        except UnicodeDecodeError:
            return ExtractionResult(
                text=data.decode("utf-8", errors="replace"),
                warnings=[
                    "The file is not valid UTF-8; undecodable bytes were "
                    "replaced with U+FFFD."
                ],
            )


class PdfExtractor(TextExtractor):
    """
    Text-layer extraction with PyMuPDF. Scanned pages are not OCR'd.

    Spans on a page are joined with single spaces and pages with a blank
    line. Pages without a text layer are skipped, so the blank lines mark
    boundaries between text-bearing pages only.
    """

    async def extract(self, data: bytes) -> ExtractionResult:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise ExtractionFailure(f"Cannot open PDF file: {exc}") from exc

        try:
            if doc.needs_pass:
                raise ExtractionFailure(
                    "PDF is password-protected. Please provide an unlocked copy."
                )
            if doc.page_count == 0:
                raise ExtractionFailure("PDF has no pages.")

            page_texts: List[str] = []
            try:
                for page in doc:
                    page_texts.append(_page_text(page))
            except Exception as exc:
                raise ExtractionFailure(f"Cannot read PDF content: {exc}") from exc
            page_count = doc.page_count
        finally:
            doc.close()

        text = "\n\n".join(t for t in page_texts if t)
        if not text.strip():
            logger.info("PDF with %d page(s) has no text layer", page_count)
            return ExtractionResult(
                text="",
                warnings=[
                    "No extractable text found in this PDF (it may be a scanned "
                    "image). Please type or paste the content manually."
                ],
            )

        logger.info("Extracted %d chars from %d PDF page(s)", len(text), page_count)
        return ExtractionResult(text=text)


class DocxExtractor(TextExtractor):
    """Raw text of paragraphs and table cells, in document order."""

    async def extract(self, data: bytes) -> ExtractionResult:
        try:
            doc = DocxDocument(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionFailure(f"Cannot open DOCX file: {exc}") from exc

        parts: List[str] = []
        for block in doc.iter_inner_content():
            if isinstance(block, Table):
                table_text = _table_text(block)
                if table_text:
                    parts.append(table_text)
            else:
                text = block.text.strip()
                if text:
                    parts.append(text)

        text = "\n\n".join(parts)
        if not text:
            return ExtractionResult(
                text="",
                warnings=["The DOCX file contains no text."],
            )
        return ExtractionResult(text=text)


class ImageOcrExtractor(TextExtractor):
    """Transcribes an image through the generation API's vision mode."""

    def __init__(self, client: GeminiClient, api_key: str, mime_type: str) -> None:
        self.client = client
        self.api_key = api_key
        self.mime_type = mime_type

    async def extract(self, data: bytes) -> ExtractionResult:
        _verify_image(data)

        text = await self.client.transcribe_image(data, self.mime_type, self.api_key)
        if not text:
            return ExtractionResult(
                text=NO_TEXT_PLACEHOLDER,
                placeholder=True,
                warnings=["No text was detected in the image."],
            )
        return ExtractionResult(text=text)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class DocumentParser:
    """Classifies an upload and runs the matching extractor."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    def extractor_for(
        self,
        strategy: ExtractionStrategy,
        media_type: str,
        api_key: str = "",
    ) -> TextExtractor:
        if strategy is ExtractionStrategy.PLAIN_TEXT:
            return PlainTextExtractor()
        if strategy is ExtractionStrategy.PDF:
            return PdfExtractor()
        if strategy is ExtractionStrategy.DOCX:
            return DocxExtractor()
        if strategy is ExtractionStrategy.IMAGE_OCR:
            return ImageOcrExtractor(self.client, api_key, _image_mime(media_type))
        raise ValueError(f"No extractor for strategy {strategy!r}")

    async def extract(
        self,
        upload: UploadedFile,
        api_key: str = "",
        max_size: Optional[int] = None,
    ) -> ExtractionResult:
        """
        Extract the text of *upload*.

        Raises:
            UnsupportedFormatError: unknown or legacy .doc media type
                                    (before anything is parsed or sent).
            FileTooLargeError:      upload exceeds MAX_FILE_SIZE.
            ExtractionFailure:      corrupt or unreadable file.
        """
        strategy = ensure_supported(upload.media_type)

        limit = settings.MAX_FILE_SIZE if max_size is None else max_size
        if upload.byte_size > limit:
            raise FileTooLargeError(
                f"File exceeds the {limit // (1024 * 1024)} MB size limit."
            )

        logger.info(
            "Extracting %r (%s, %s bytes) via %s",
            upload.name,
            upload.media_type,
            f"{upload.byte_size:,}",
            strategy.value,
        )
        extractor = self.extractor_for(strategy, upload.media_type, api_key)
        result = await extractor.extract(upload.data)
        for warning in result.warnings:
            logger.warning("%s: %s", upload.name, warning)
        return result


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def _page_text(page: "fitz.Page") -> str:
    """Join the text spans of one page with single spaces."""
    spans: List[str] = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                txt = span.get("text", "").strip()
                if txt:
                    spans.append(txt)
    return " ".join(spans)


def _table_text(table: Table) -> str:
    """Format a DOCX table as pipe-delimited rows."""
    rows: List[str] = []
    for row in table.rows:
        cells = [cell.text.strip() for cell in row.cells]
        if any(cells):
            rows.append(" | ".join(cells))
    return "\n".join(rows)


def _verify_image(data: bytes) -> None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ExtractionFailure(f"Cannot read image file: {exc}") from exc


def _image_mime(media_type: str) -> str:
    """Canonical image MIME type for the vision request (image/jpg → image/jpeg)."""
    mt = media_type.split(";", 1)[0].strip().lower()
    return "image/jpeg" if mt == "image/jpg" else mt
