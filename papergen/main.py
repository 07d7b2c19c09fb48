"""
Main FastAPI application for the PaperGen backend.
Handles CORS, request logging middleware, lifespan events, error mapping
and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from papergen import __version__
from papergen.config import settings
from papergen.exceptions import PaperGenError
from papergen.routers import documents, health, papers

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# httpx logs full request URLs at INFO, and the Gemini key is a query param
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting PaperGen backend …")
    logger.info("=" * 60)

    logger.info("✓ Generation model: %s", settings.GEMINI_MODEL)
    logger.info(
        "✓ Retry budget: %d retries, first backoff %.1fs",
        settings.GENERATION_MAX_RETRIES,
        settings.GENERATION_BACKOFF_SECONDS,
    )
    if settings.GEMINI_API_KEY:
        logger.info("✓ Server-side GEMINI_API_KEY configured")
    else:
        logger.warning(
            "⚠ No GEMINI_API_KEY set — requests must send their own X-Api-Key header"
        )

    logger.info("=" * 60)
    logger.info("  PaperGen backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PaperGen API",
    description=(
        "**PaperGen** — AI-generated thesis and conference papers.\n\n"
        "Upload a file or type a prompt, generate a fully formatted paper "
        "with Gemini, then export it.\n\n"
        "Key endpoints:\n"
        "- `POST /api/papers/extract` — extract text from .txt/.pdf/.docx/images\n"
        "- `POST /api/papers/generate` — generate a paper\n"
        "- `GET  /api/papers/export/{html|word|text}` — download\n"
        "- `POST /api/documents/` — save the current paper\n"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(PaperGenError)
async def papergen_exception_handler(request: Request, exc: PaperGenError):
    """Return the failure kind so clients can show actionable guidance."""
    logger.warning(
        "%s %s failed (%s): %s",
        request.method,
        request.url.path,
        exc.kind,
        exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "kind": exc.kind,
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,    prefix="/api/health",    tags=["Health"])
app.include_router(papers.router,    prefix="/api/papers",    tags=["Papers"])
app.include_router(documents.router, prefix="/api/documents", tags=["Documents"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root: basic service info."""
    return {
        "name": "PaperGen API",
        "version": __version__,
        "description": "Academic Paper Generation Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "extract": "/api/papers/extract",
            "generate": "/api/papers/generate",
            "export": "/api/papers/export/{format}",
            "documents": "/api/documents",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "papergen.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
