"""
Paper extraction, generation and export endpoints.

POST /extract           — extract plain text from an uploaded file.
POST /generate          — generate a formatted paper from text + config.
GET  /current           — the paper currently held for this user.
GET  /export/{format}   — download the current paper as html / word / text.
"""
from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from papergen.config import settings
from papergen.dependencies.auth import get_api_key, get_current_user_id
from papergen.dependencies.services import get_document_parser, get_workspace_registry
from papergen.exceptions import FileTooLargeError
from papergen.models.schemas import (
    CurrentDocumentResponse,
    ExportFormat,
    ExtractionResponse,
    GenerateRequest,
    GenerateResponse,
)
from papergen.services.document_parser import DocumentParser, UploadedFile
from papergen.services.exporters import FormatOptions
from papergen.services.format_classifier import ensure_supported, guess_media_type
from papergen.services.pipeline import WorkspaceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

@router.post("/extract", response_model=ExtractionResponse)
async def extract_text(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    api_key: str = Depends(get_api_key),
    parser: DocumentParser = Depends(get_document_parser),
) -> ExtractionResponse:
    """
    Extract plain text from a .txt, .pdf, .docx or image upload.

    - Legacy .doc and unknown types are rejected before the file is read
    - Images are transcribed by the generation API (requires an API key)
    - A textless but valid file returns ``empty: true`` with warnings
    """
    filename = file.filename or "upload"
    media_type = guess_media_type(filename, file.content_type)
    strategy = ensure_supported(media_type)

    data = await _read_limited(file, settings.MAX_FILE_SIZE)
    upload = UploadedFile(name=filename, media_type=media_type, data=data)
    result = await parser.extract(upload, api_key=api_key)

    logger.info(
        "user=%s extracted %d chars from %r (%d warnings)",
        user_id,
        len(result.text),
        filename,
        len(result.warnings),
    )
    return ExtractionResponse(
        filename=filename,
        media_type=media_type,
        strategy=strategy.value,
        text=result.text,
        warnings=result.warnings,
        empty=result.is_empty,
    )


async def _read_limited(file: UploadFile, limit: int) -> bytes:
    """Read the upload in 1 MB slices, failing as soon as *limit* is exceeded."""
    buf = bytearray()
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            raise FileTooLargeError(
                f"File exceeds the {limit // (1024 * 1024)} MB size limit."
            )
    return bytes(buf)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

@router.post("/generate", response_model=GenerateResponse)
async def generate_paper(
    request: GenerateRequest,
    user_id: str = Depends(get_current_user_id),
    api_key: str = Depends(get_api_key),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> GenerateResponse:
    """Generate a formatted paper; it becomes this user's current document."""
    workspace = registry.get(user_id)
    document = await workspace.generate(request.text, request.config, api_key)
    return GenerateResponse(
        content=document.sanitized_markup,
        template=request.config.template,
        reference_style=request.config.resolved_reference_style(),
    )


@router.get("/current", response_model=CurrentDocumentResponse)
async def current_paper(
    user_id: str = Depends(get_current_user_id),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> CurrentDocumentResponse:
    workspace = registry.get(user_id)
    document = workspace.require_document()
    return CurrentDocumentResponse(
        content=document.sanitized_markup,
        user_input=workspace.user_input,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

@router.get("/export/{fmt}")
async def export_paper(
    fmt: ExportFormat,
    font_family: Optional[str] = Query(None, max_length=120, pattern=r"^[\w\s,'\"-]+$"),
    font_size_pt: Optional[float] = Query(None, gt=0, le=72),
    line_height: Optional[float] = Query(None, gt=0, le=4),
    margin_cm: Optional[float] = Query(None, ge=0, le=10),
    text_align: Optional[Literal["left", "right", "center", "justify"]] = Query(None),
    color: Optional[str] = Query(None, pattern=r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20})$"),
    user_id: str = Depends(get_current_user_id),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
) -> Response:
    """
    Download the current paper. Formatting overrides given as query
    parameters replace the template defaults for this export only.
    """
    workspace = registry.get(user_id)
    workspace.require_document()

    options = FormatOptions.for_template(workspace.template).with_overrides(
        font_family=font_family,
        font_size_pt=font_size_pt,
        line_height=line_height,
        margin_cm=margin_cm,
        text_align=text_align,
        color=color,
    )
    artifact = workspace.export(fmt, options)
    return Response(
        content=artifact.data,
        media_type=artifact.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.file_name}"'},
    )
