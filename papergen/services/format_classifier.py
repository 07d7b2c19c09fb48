"""
Media-type classification for uploaded files.

Pure functions only: no I/O happens here, so the mapping can be tested
exhaustively and is applied before any byte is parsed or sent anywhere.
"""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from papergen.exceptions import LegacyWordFormatError, UnsupportedFormatError


class ExtractionStrategy(str, Enum):
    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    DOCX = "docx"
    LEGACY_WORD = "legacy_word"
    IMAGE_OCR = "image_ocr"


@dataclass(frozen=True)
class Unsupported:
    """Classification result for a media type outside the recognized set."""

    media_type: str


DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_STRATEGIES = {
    "text/plain": ExtractionStrategy.PLAIN_TEXT,
    "application/pdf": ExtractionStrategy.PDF,
    DOCX_MEDIA_TYPE: ExtractionStrategy.DOCX,
    "application/msword": ExtractionStrategy.LEGACY_WORD,
}

IMAGE_SUBTYPES = frozenset({"png", "jpeg", "jpg", "gif", "webp", "bmp"})

# Types that say nothing about the content; the filename is consulted instead
_GENERIC_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})


def _normalize(media_type: str) -> str:
    """Lower-case and drop parameters such as ``; charset=utf-8``."""
    return media_type.split(";", 1)[0].strip().lower()


def classify(media_type: str) -> Union[ExtractionStrategy, Unsupported]:
    """Map a declared media type to its extraction strategy."""
    mt = _normalize(media_type or "")
    strategy = _STRATEGIES.get(mt)
    if strategy is not None:
        return strategy

    major, _, minor = mt.partition("/")
    if major == "image" and minor in IMAGE_SUBTYPES:
        return ExtractionStrategy.IMAGE_OCR

    return Unsupported(media_type)


def ensure_supported(media_type: str) -> ExtractionStrategy:
    """
    Classify and reject anything that cannot be extracted.

    Raises:
        LegacyWordFormatError:  binary .doc upload.
        UnsupportedFormatError: any other unrecognized type.
    """
    result = classify(media_type)
    if isinstance(result, Unsupported):
        raise UnsupportedFormatError(result.media_type)
    if result is ExtractionStrategy.LEGACY_WORD:
        raise LegacyWordFormatError(media_type)
    return result


def guess_media_type(filename: Optional[str], declared: Optional[str]) -> str:
    """
    Return the declared type, or one guessed from the filename when the
    client sent nothing useful.
    """
    declared = (declared or "").strip()
    if _normalize(declared) not in _GENERIC_TYPES:
        return declared
    if filename:
        if filename.lower().endswith(".docx"):
            # Not present in every platform's mimetypes table
            return DOCX_MEDIA_TYPE
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return declared or "application/octet-stream"
