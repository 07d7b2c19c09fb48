"""
Error taxonomy for the extraction and generation pipeline.

Every failure a caller can see is a PaperGenError subclass carrying a stable
``kind`` string and the HTTP status the API layer maps it to, so a bad key,
a rate limit and a transient outage are never collapsed into one message.
"""
from __future__ import annotations

from typing import Optional


class PaperGenError(Exception):
    """Base class for all user-visible pipeline failures."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


# ---------------------------------------------------------------------------
# Classification / extraction
# ---------------------------------------------------------------------------

class UnsupportedFormatError(PaperGenError):
    """The declared media type maps to no extraction strategy."""

    kind = "unsupported_format"
    status_code = 415

    def __init__(self, media_type: str, detail: Optional[str] = None) -> None:
        super().__init__(
            detail
            or f"Unsupported file type {media_type!r}. "
            "Upload a .txt, .pdf, .docx or image file."
        )
        self.media_type = media_type


class LegacyWordFormatError(UnsupportedFormatError):
    """Binary .doc files are rejected outright rather than misparsed."""

    def __init__(self, media_type: str = "application/msword") -> None:
        super().__init__(
            media_type,
            "Legacy Word (.doc) files cannot be read. "
            "Open the file in Word and re-save it as .docx, then upload again.",
        )


class FileTooLargeError(PaperGenError):
    kind = "file_too_large"
    status_code = 413


class ExtractionFailure(PaperGenError):
    """The artifact is corrupt or unparseable. Never retried."""

    kind = "extraction_failure"
    status_code = 422


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class EmptyInputError(PaperGenError):
    kind = "empty_input"
    status_code = 400


class GenerationError(PaperGenError):
    """Base class for failures talking to the generation endpoint."""

    kind = "generation_failure"
    status_code = 502


class AuthenticationFailure(GenerationError):
    """HTTP 401/403 or no key at all: the API key is missing or invalid."""

    kind = "authentication_failure"
    status_code = 401


class RateLimited(GenerationError):
    """HTTP 429 persisted through the whole retry budget."""

    kind = "rate_limited"
    status_code = 429


class TransportFailure(GenerationError):
    """Network-level failure persisted through the whole retry budget."""

    kind = "transport_failure"

    def __init__(self, detail: str, last_error: Optional[BaseException] = None) -> None:
        super().__init__(detail)
        self.last_error = last_error


class GenerationHTTPError(GenerationError):
    """Any other non-2xx response from the generation endpoint."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(f"Generation API returned HTTP {status}: {body[:300]}".rstrip(": "))
        self.status = status


class EmptyGeneration(GenerationError):
    """A well-formed response that carried no usable text."""

    kind = "empty_generation"


# ---------------------------------------------------------------------------
# Workspace / storage
# ---------------------------------------------------------------------------

class NoDocumentError(PaperGenError):
    kind = "no_document"
    status_code = 404


class DocumentNotFoundError(PaperGenError):
    kind = "document_not_found"
    status_code = 404
