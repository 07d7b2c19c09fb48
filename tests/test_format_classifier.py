"""Tests for media-type classification."""
import pytest

from papergen.exceptions import LegacyWordFormatError, UnsupportedFormatError
from papergen.services.format_classifier import (
    DOCX_MEDIA_TYPE,
    ExtractionStrategy,
    Unsupported,
    classify,
    ensure_supported,
    guess_media_type,
)


@pytest.mark.parametrize(
    "media_type, expected",
    [
        ("text/plain", ExtractionStrategy.PLAIN_TEXT),
        ("text/plain; charset=utf-8", ExtractionStrategy.PLAIN_TEXT),
        ("application/pdf", ExtractionStrategy.PDF),
        ("APPLICATION/PDF", ExtractionStrategy.PDF),
        (DOCX_MEDIA_TYPE, ExtractionStrategy.DOCX),
        ("application/msword", ExtractionStrategy.LEGACY_WORD),
        ("image/png", ExtractionStrategy.IMAGE_OCR),
        ("image/jpeg", ExtractionStrategy.IMAGE_OCR),
        ("image/jpg", ExtractionStrategy.IMAGE_OCR),
        ("image/gif", ExtractionStrategy.IMAGE_OCR),
        ("image/webp", ExtractionStrategy.IMAGE_OCR),
        ("image/bmp", ExtractionStrategy.IMAGE_OCR),
    ],
)
def test_supported_types(media_type, expected):
    assert classify(media_type) is expected


@pytest.mark.parametrize(
    "media_type",
    ["application/zip", "image/svg+xml", "image/tiff", "text/html", "", "video/mp4"],
)
def test_unsupported_type_is_echoed_back(media_type):
    result = classify(media_type)
    assert isinstance(result, Unsupported)
    assert result.media_type == media_type


def test_ensure_supported_rejects_legacy_word():
    with pytest.raises(LegacyWordFormatError) as exc_info:
        ensure_supported("application/msword")
    assert ".docx" in exc_info.value.detail
    assert exc_info.value.kind == "unsupported_format"


def test_ensure_supported_rejects_unknown_type():
    with pytest.raises(UnsupportedFormatError) as exc_info:
        ensure_supported("application/x-rar")
    assert exc_info.value.media_type == "application/x-rar"


def test_guess_media_type_keeps_declared_type():
    assert guess_media_type("paper.pdf", "text/plain") == "text/plain"


def test_guess_media_type_falls_back_to_extension():
    assert guess_media_type("paper.pdf", "application/octet-stream") == "application/pdf"
    assert guess_media_type("notes.docx", "") == DOCX_MEDIA_TYPE
    assert guess_media_type("notes.txt", None) == "text/plain"
