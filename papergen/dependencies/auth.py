"""
Request identity and credential dependencies for FastAPI routes.

The user id comes from the X-User-Id header set by the frontend after its
own sign-in flow; the Gemini key from X-Api-Key, falling back to the
server-side GEMINI_API_KEY.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from papergen.config import settings


async def get_current_user_id(
    x_user_id: str = Header(..., alias="X-User-Id"),
) -> str:
    """Extract the authenticated user ID from the request header. Raises 401 if blank."""
    if not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header.",
        )
    return x_user_id.strip()


async def get_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key"),
) -> str:
    """Per-request Gemini key, or the configured default (may be empty)."""
    return (x_api_key or "").strip() or settings.GEMINI_API_KEY
