"""Schema models for PaperGen."""
from papergen.models.schemas import (
    Author,
    CurrentDocumentResponse,
    DocumentSaveRequest,
    DocumentSaveResponse,
    ExportFormat,
    ExtractionResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationConfig,
    HealthCheckResponse,
    ReferenceStyle,
    SavedDocumentResponse,
    TargetLength,
    TemplateKind,
    Tone,
)

__all__ = [
    # Enums
    "TemplateKind",
    "Tone",
    "TargetLength",
    "ReferenceStyle",
    "ExportFormat",
    # Generation
    "Author",
    "GenerationConfig",
    "GenerateRequest",
    "GenerateResponse",
    "CurrentDocumentResponse",
    # Extraction
    "ExtractionResponse",
    # Saved documents
    "DocumentSaveRequest",
    "DocumentSaveResponse",
    "SavedDocumentResponse",
    # Health
    "HealthCheckResponse",
]
