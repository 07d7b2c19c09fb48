"""
Service providers for FastAPI routes.

Module-level singletons are returned by default; tests swap them through
``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Depends

from papergen.services.document_parser import DocumentParser
from papergen.services.document_store import DocumentStore, document_store
from papergen.services.generation_client import GeminiClient, gemini_client
from papergen.services.pipeline import WorkspaceRegistry

workspace_registry = WorkspaceRegistry(gemini_client)


def get_gemini_client() -> GeminiClient:
    return gemini_client


def get_document_parser(client: GeminiClient = Depends(get_gemini_client)) -> DocumentParser:
    return DocumentParser(client)


def get_workspace_registry() -> WorkspaceRegistry:
    return workspace_registry


def get_document_store() -> DocumentStore:
    return document_store
