"""
Gemini generateContent client with bounded exponential-backoff retry.

Public API
----------
GeminiClient.generate(payload, api_key)                      -> str
GeminiClient.transcribe_image(data, mime_type, api_key)      -> str

Failures are classified into the taxonomy in ``papergen.exceptions``:
401/403 → AuthenticationFailure (never retried), 429 → RateLimited,
network errors → TransportFailure, other non-2xx → GenerationHTTPError,
no candidate text → EmptyGeneration (never retried).
"""
from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from papergen.config import settings
from papergen.exceptions import (
    AuthenticationFailure,
    EmptyGeneration,
    GenerationError,
    GenerationHTTPError,
    RateLimited,
    TransportFailure,
)
from papergen.services.prompt_composer import PromptPayload
from papergen.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

OCR_INSTRUCTION = (
    "Transcribe all visible text in this image exactly as written. "
    "Preserve table structure using rows and columns separated by ' | '. "
    "Return only the transcribed text with no commentary."
)

_AUTH_STATUSES = frozenset({401, 403})


class GeminiClient:
    """
    Client for the Gemini ``generateContent`` endpoint.

    * Up to MAX_RETRIES retries after the first attempt (4 calls at most)
    * Backoff delays BACKOFF_SECONDS * 2**n: 1s, 2s, 4s with the defaults
    * The delay is an ``asyncio.sleep``, so it suspends only this call and
      is cancelled together with the calling task
    """

    MAX_RETRIES: int = settings.GENERATION_MAX_RETRIES
    BACKOFF_SECONDS: float = settings.GENERATION_BACKOFF_SECONDS
    TIMEOUT: float = float(settings.GEMINI_TIMEOUT)

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ) -> None:
        self.base_url = settings.GEMINI_BASE_URL.rstrip("/")
        self.model = settings.GEMINI_MODEL
        self.timeout = httpx.Timeout(self.TIMEOUT, connect=10.0)
        self._transport = transport
        self._sleep = sleep or asyncio.sleep

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(self, payload: PromptPayload, api_key: str) -> str:
        """
        Send the composed prompt and return the first candidate's text.

        Raises:
            AuthenticationFailure: no key, or HTTP 401/403.
            RateLimited:           HTTP 429 on the final attempt.
            TransportFailure:      network error on the final attempt.
            GenerationHTTPError:   other non-2xx on the final attempt.
            EmptyGeneration:       success response without text.
        """
        self._require_key(api_key)
        body = {
            "contents": [{"parts": [{"text": payload.user_content}]}],
            "systemInstruction": {"parts": [{"text": payload.system_instruction}]},
        }

        attempts = self.MAX_RETRIES + 1
        last_error: Optional[GenerationError] = None

        for attempt in range(1, attempts + 1):
            try:
                data = await self._post(body, api_key)
            except AuthenticationFailure:
                raise
            except GenerationError as exc:
                last_error = exc
                logger.warning(
                    "generate: attempt %d/%d failed (%s): %s",
                    attempt,
                    attempts,
                    exc.kind,
                    exc.detail,
                )
                if attempt < attempts:
                    delay = self.BACKOFF_SECONDS * 2 ** (attempt - 1)
                    await self._sleep(delay)
                continue

            text = _first_candidate_text(data)
            if not text or not text.strip():
                raise EmptyGeneration(
                    "The model returned no content. Try again or shorten the input."
                )
            if attempt > 1:
                logger.info("generate: succeeded on attempt %d", attempt)
            return text

        logger.error("generate: all %d attempts failed", attempts)
        raise last_error or GenerationError("Generation failed.")

    async def transcribe_image(self, data: bytes, mime_type: str, api_key: str) -> str:
        """
        Single-shot vision call returning the text visible in an image.

        Uses the same endpoint and error classification as ``generate`` but
        never retries. Returns an empty string when the model sees no text.
        """
        self._require_key(api_key)
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": OCR_INSTRUCTION},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(data).decode("ascii"),
                            }
                        },
                    ]
                }
            ]
        }
        result = await self._post(body, api_key)
        return (_first_candidate_text(result) or "").strip()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    @staticmethod
    def _require_key(api_key: str) -> None:
        if not api_key or not api_key.strip():
            raise AuthenticationFailure(
                "Missing Gemini API key. Add your key in Settings "
                "(get one at https://aistudio.google.com/app/apikey)."
            )

    async def _post(self, body: Dict[str, Any], api_key: str) -> Dict[str, Any]:
        """POST *body* once and return the decoded JSON, or raise a GenerationError."""
        t0 = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.endpoint,
                    params={"key": api_key},
                    json=body,
                )
        except httpx.TransportError as exc:
            raise TransportFailure(
                f"Could not reach the generation API: {exc.__class__.__name__}: {exc}",
                last_error=exc,
            ) from exc

        elapsed_ms = (time.perf_counter() - t0) * 1000
        logger.debug("Gemini responded %d in %.1f ms", resp.status_code, elapsed_ms)

        if resp.status_code in _AUTH_STATUSES:
            raise AuthenticationFailure(
                "Invalid or missing API key: the generation API rejected the "
                f"request (HTTP {resp.status_code}). Check your Gemini API key in Settings."
            )
        if resp.status_code == 429:
            raise RateLimited(
                "Rate limit exceeded: too many requests. Wait a moment and try again."
            )
        if not resp.is_success:
            raise GenerationHTTPError(resp.status_code, truncate_text(resp.text, 300))

        try:
            return resp.json()
        except ValueError as exc:
            raise GenerationHTTPError(
                resp.status_code, "response body is not valid JSON"
            ) from exc


def _first_candidate_text(data: Any) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` or None when absent."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


# ---------------------------------------------------------------------------
# Module-level singleton; routes get it through papergen.dependencies.services
# ---------------------------------------------------------------------------
gemini_client = GeminiClient()
