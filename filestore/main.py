"""
filestore/main.py

FastAPI application entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Make sure the upload directory exists before serving requests
  - Register all API routers
  - Add a global exception handler for uncaught AppBaseException
  - Serve the landing page, a /health endpoint and the static public/ dir
  - Run the app under uvicorn on HOST:PORT (python -m filestore.main)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from filestore.api.files_controller import router as files_router
from filestore.api.upload_controller import router as upload_router
from filestore.core.config import settings
from filestore.core.exceptions import AppBaseException
from filestore.core.logger import configure_logging, get_logger

logger = get_logger(__name__)


# ── Lifespan ───────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    root = settings.upload_root
    root.mkdir(parents=True, exist_ok=True)
    allowed = ", ".join(sorted(settings.allowed_extension_set)) or "(none, every upload is rejected)"
    logger.info("Storing uploads under '%s'.", root)
    logger.info("Allowed extensions: %s | max size: %d bytes", allowed, settings.max_upload_size)
    yield


# ── App instance ───────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Accepts file uploads, stores them under an upload directory "
        "(optionally in subfolders), and lists and serves them back."
    ),
    lifespan=lifespan,
)

# ── Routers ────────────────────────────────────────────────────────────────────

app.include_router(upload_router)
app.include_router(files_router)

# ── Global exception handler ───────────────────────────────────────────────────

@app.exception_handler(AppBaseException)
async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
    """
    Safety-net for any AppBaseException that escapes controller-level handling.
    Returns the standard error shape: { "error": "..." }
    """
    logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ── Landing page & health ──────────────────────────────────────────────────────

@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> str:
    return (
        f"<h1>{settings.app_name} running on port {settings.port}</h1>"
        "<p>Upload files to <strong>/upload</strong> and browse them at "
        "<strong>/files</strong>.</p>"
        "<p>To store into a subfolder, send a <strong>subfolder</strong> field "
        "in the same form.</p>"
    )


@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "upload_root": str(settings.upload_root),
    }


# ── Static assets ──────────────────────────────────────────────────────────────
# Mounted last so the API routes above take precedence.

if Path(settings.public_directory).is_dir():
    app.mount("/", StaticFiles(directory=settings.public_directory), name="public")


def run() -> None:
    """Console entry point."""
    level = configure_logging()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=logging.getLevelName(level).lower(),
    )


if __name__ == "__main__":
    run()
