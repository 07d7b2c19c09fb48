"""
Saved document endpoints.

POST   /             — save the current paper.
GET    /             — list the user's saved papers, newest first.
DELETE /{id}         — delete a saved paper.
POST   /{id}/load    — make a saved paper the current one.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from papergen.dependencies.auth import get_current_user_id
from papergen.dependencies.services import get_document_store, get_workspace_registry
from papergen.exceptions import DocumentNotFoundError
from papergen.models.schemas import (
    CurrentDocumentResponse,
    DocumentSaveRequest,
    DocumentSaveResponse,
    SavedDocumentResponse,
)
from papergen.services.document_store import DocumentStore, SavedDocument
from papergen.services.pipeline import WorkspaceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/",
    response_model=DocumentSaveResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_document(
    request: DocumentSaveRequest,
    user_id: str = Depends(get_current_user_id),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    store: DocumentStore = Depends(get_document_store),
) -> DocumentSaveResponse:
    """Save the current paper together with the input it was generated from."""
    workspace = registry.get(user_id)
    document = workspace.require_document()
    doc_id = await store.save(
        user_id,
        title=request.title,
        template=workspace.template,
        content=document.sanitized_markup,
        user_input=request.user_input if request.user_input is not None else workspace.user_input,
    )
    return DocumentSaveResponse(id=doc_id)


@router.get("/", response_model=List[SavedDocumentResponse])
async def list_documents(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
) -> List[SavedDocumentResponse]:
    docs = await store.list(user_id)
    return [SavedDocumentResponse.model_validate(d) for d in docs]


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
) -> None:
    await _owned(store, document_id, user_id)
    await store.delete(document_id)


@router.post("/{document_id}/load", response_model=CurrentDocumentResponse)
async def load_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    store: DocumentStore = Depends(get_document_store),
) -> CurrentDocumentResponse:
    """Replace the current paper with a saved one."""
    saved = await _owned(store, document_id, user_id)
    document = registry.get(user_id).load(saved.content, saved.template, saved.user_input)
    return CurrentDocumentResponse(
        content=document.sanitized_markup,
        user_input=saved.user_input,
    )


async def _owned(store: DocumentStore, document_id: str, user_id: str) -> SavedDocument:
    """Fetch a saved paper, hiding other users' papers behind a 404."""
    saved = await store.get(document_id)
    if saved.user_id != user_id:
        raise DocumentNotFoundError(f"Document {document_id} not found.")
    return saved
