"""
Test helpers shared across modules.

The Gemini endpoint is replaced by ``FakeGemini``: an httpx.MockTransport
handler that plays back a scripted queue of responses or exceptions and
records every request, plus a sleep hook that records backoff delays instead
of waiting. No test touches the network.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Union

import httpx

from papergen.services.generation_client import GeminiClient


def gemini_response(text: str, status_code: int = 200) -> httpx.Response:
    """A generateContent success body carrying *text* as the first candidate."""
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


class FakeGemini:
    """Scripted generateContent endpoint."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.script: List[Union[httpx.Response, Exception]] = []
        self.sleeps: List[float] = []

    def queue(self, *items: Union[httpx.Response, Exception]) -> "FakeGemini":
        self.script.extend(items)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if self.script else gemini_response("<p>default</p>")
        if isinstance(item, Exception):
            raise item
        return item

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)

    def client(self) -> GeminiClient:
        return GeminiClient(transport=httpx.MockTransport(self.handler), sleep=self.sleep)

    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


AUTH_HEADERS = {
    "X-User-Id": "test-user-1",
}

AUTH_HEADERS_USER2 = {
    "X-User-Id": "test-user-2",
}
