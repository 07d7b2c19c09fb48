"""
Generation pipeline and per-user workspace.

Flow: text + GenerationConfig → compose → Gemini → strip fences → sanitize
→ GeneratedDocument (held in the workspace) → export on demand.

A workspace holds exactly one GeneratedDocument. Calls are meant to be
serialised by the caller; if a newer call starts while an older one is still
pending, the older result is returned to its caller but never stored.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from papergen.exceptions import EmptyInputError, NoDocumentError
from papergen.models.schemas import ExportFormat, GenerationConfig, TemplateKind
from papergen.services.exporters import ExportArtifact, FormatOptions, render
from papergen.services.generation_client import GeminiClient
from papergen.services.prompt_composer import compose
from papergen.services.sanitizer import sanitize, strip_code_fences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedDocument:
    """Model output; only ``sanitized_markup`` leaves the pipeline."""

    raw_model_text: str
    sanitized_markup: str

    @classmethod
    def from_model_text(cls, raw: str) -> "GeneratedDocument":
        return cls(raw_model_text=raw, sanitized_markup=sanitize(strip_code_fences(raw)))


class PaperWorkspace:
    """The current document of one user plus the input it came from."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client
        self.document: Optional[GeneratedDocument] = None
        self.template: TemplateKind = TemplateKind.THESIS
        self.user_input: str = ""
        self._seq = itertools.count(1)
        self._latest = 0

    async def generate(
        self,
        user_text: str,
        config: GenerationConfig,
        api_key: str,
    ) -> GeneratedDocument:
        """
        Generate a document and make it current.

        Raises:
            EmptyInputError: *user_text* is blank.
            GenerationError: any failure from the generation client.
        """
        if not user_text or not user_text.strip():
            raise EmptyInputError("Please enter some content or a prompt first.")

        ticket = next(self._seq)
        self._latest = ticket

        payload = compose(user_text, config)
        raw = await self.client.generate(payload, api_key)
        document = GeneratedDocument.from_model_text(raw)

        if ticket != self._latest:
            logger.info(
                "Generation #%d superseded by #%d; result not stored",
                ticket,
                self._latest,
            )
            return document

        self.document = document
        self.template = config.template
        self.user_input = user_text
        logger.info(
            "Generation #%d stored (%d chars of markup)",
            ticket,
            len(document.sanitized_markup),
        )
        return document

    def load(self, content: str, template: TemplateKind, user_input: str = "") -> GeneratedDocument:
        """Make a previously saved document current (sanitized again on load)."""
        self._latest = next(self._seq)
        self.document = GeneratedDocument(
            raw_model_text=content,
            sanitized_markup=sanitize(content),
        )
        self.template = template
        self.user_input = user_input
        return self.document

    def require_document(self) -> GeneratedDocument:
        if self.document is None:
            raise NoDocumentError("No document has been generated yet.")
        return self.document

    def export(self, fmt: ExportFormat, options: Optional[FormatOptions] = None) -> ExportArtifact:
        """Render the current document; options default to the template's."""
        document = self.require_document()
        options = options or FormatOptions.for_template(self.template)
        return render(fmt, document.sanitized_markup, options)


class WorkspaceRegistry:
    """One PaperWorkspace per user id, created on first use."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client
        self._workspaces: Dict[str, PaperWorkspace] = {}

    def get(self, user_id: str) -> PaperWorkspace:
        workspace = self._workspaces.get(user_id)
        if workspace is None:
            workspace = PaperWorkspace(self.client)
            self._workspaces[user_id] = workspace
        return workspace
