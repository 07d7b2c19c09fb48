"""
Storage collaborator for saved documents.

The pipeline itself never touches storage; only the API layer does, through
the ``DocumentStore`` protocol. ``InMemoryDocumentStore`` is the process-local
implementation used by default and in tests.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Protocol

from papergen.exceptions import DocumentNotFoundError
from papergen.models.schemas import TemplateKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedDocument:
    id: str
    user_id: str
    title: str
    template: TemplateKind
    content: str
    user_input: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DocumentStore(Protocol):
    async def save(
        self,
        user_id: str,
        *,
        title: str,
        template: TemplateKind,
        content: str,
        user_input: str = "",
    ) -> str: ...

    async def list(self, user_id: str) -> List[SavedDocument]: ...

    async def get(self, document_id: str) -> SavedDocument: ...

    async def delete(self, document_id: str) -> None: ...


class InMemoryDocumentStore:
    """Dict-backed DocumentStore; contents are lost on restart."""

    def __init__(self) -> None:
        self._docs: Dict[str, SavedDocument] = {}
        self._lock = asyncio.Lock()

    async def save(
        self,
        user_id: str,
        *,
        title: str,
        template: TemplateKind,
        content: str,
        user_input: str = "",
    ) -> str:
        doc = SavedDocument(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            template=template,
            content=content,
            user_input=user_input,
        )
        async with self._lock:
            self._docs[doc.id] = doc
        logger.info("Saved document id=%s for user=%s", doc.id, user_id)
        return doc.id

    async def list(self, user_id: str) -> List[SavedDocument]:
        """The user's documents, newest first."""
        async with self._lock:
            docs = [d for d in reversed(self._docs.values()) if d.user_id == user_id]
        return sorted(docs, key=lambda d: d.created_at, reverse=True)

    async def get(self, document_id: str) -> SavedDocument:
        async with self._lock:
            doc = self._docs.get(document_id)
        if doc is None:
            raise DocumentNotFoundError(f"Document {document_id} not found.")
        return doc

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            if self._docs.pop(document_id, None) is None:
                raise DocumentNotFoundError(f"Document {document_id} not found.")
        logger.info("Deleted document id=%s", document_id)


document_store = InMemoryDocumentStore()
