"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum


# Enums
class TemplateKind(str, Enum):
    """Structural / citation convention of the generated document."""

    THESIS = "THESIS"
    CONFERENCE = "CONFERENCE"


class Tone(str, Enum):
    """Writing register requested from the model."""

    ACADEMIC = "Academic"
    PROFESSIONAL = "Professional"
    ESSAY = "Essay"
    CREATIVE = "Creative"


class TargetLength(str, Enum):
    """Printed length tier requested from the model."""

    AUTO = "Auto"
    SHORT = "Short"
    MEDIUM = "Medium"
    LONG = "Long"
    EXTRA_LONG = "ExtraLong"


class ReferenceStyle(str, Enum):
    """Citation grammar; AUTO resolves from the template."""

    AUTO = "Auto"
    HARVARD = "Harvard"
    IEEE = "IEEE"


class ExportFormat(str, Enum):
    """Download encodings for the current document."""

    HTML = "html"
    WORD = "word"
    TEXT = "text"


# Generation Schemas
class Author(BaseModel):
    """One author line the model must reproduce verbatim."""

    name: str = Field("", max_length=255)
    affiliation: Optional[str] = Field(None, max_length=500)
    email: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(frozen=True)


class GenerationConfig(BaseModel):
    """
    Immutable generation settings assembled right before each call.

    An empty ``authors`` list (or one whose entries all have blank names)
    lets the model invent plausible authorship.
    """

    template: TemplateKind = TemplateKind.THESIS
    tone: Tone = Tone.ACADEMIC
    target_length: TargetLength = TargetLength.AUTO
    reference_style: ReferenceStyle = ReferenceStyle.AUTO
    authors: List[Author] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def named_authors(self) -> List[Author]:
        """Authors with a non-blank name, in the order given."""
        return [a for a in self.authors if a.name.strip()]

    def resolved_reference_style(self) -> ReferenceStyle:
        """Resolve AUTO: Harvard for a thesis, IEEE for a conference paper."""
        if self.reference_style is not ReferenceStyle.AUTO:
            return self.reference_style
        if self.template is TemplateKind.CONFERENCE:
            return ReferenceStyle.IEEE
        return ReferenceStyle.HARVARD


class GenerateRequest(BaseModel):
    """Schema for a generation request."""

    text: str = Field(..., max_length=500_000)
    config: GenerationConfig = Field(default_factory=GenerationConfig)


class GenerateResponse(BaseModel):
    """Schema for the sanitized generation result."""

    content: str
    template: TemplateKind
    reference_style: ReferenceStyle
    message: str = "Document generated successfully"


class CurrentDocumentResponse(BaseModel):
    """Schema for the document currently held in the workspace."""

    content: str
    user_input: str = ""


# Extraction Schemas
class ExtractionResponse(BaseModel):
    """Schema for text extracted from an uploaded file."""

    filename: str
    media_type: str
    strategy: str
    text: str
    warnings: List[str] = Field(default_factory=list)
    empty: bool = False


# Saved Document Schemas
class DocumentSaveRequest(BaseModel):
    """Schema for saving the current document."""

    title: str = Field(..., min_length=1, max_length=255)
    user_input: Optional[str] = None


class DocumentSaveResponse(BaseModel):
    """Schema for save confirmation."""

    id: str
    message: str = "Document saved successfully"


class SavedDocumentResponse(BaseModel):
    """Schema for a stored document."""

    id: str
    title: str
    template: TemplateKind
    content: str
    user_input: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Health Schemas
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    gemini_model: str
    api_key_configured: bool
    timestamp: datetime
