"""
filestore/api/upload_controller.py

Handles incoming requests to POST /upload.

This layer is responsible only for HTTP concerns:
  - Refusing bodies whose Content-Length is already above the size
    ceiling, before the multipart form is parsed.
  - Parsing the multipart form and picking out the 'file' part and the
    optional 'subfolder' text field.
  - Delegating validation and storage to UploadService.
  - Translating service-level errors into appropriate HTTP responses.

Responses:
  200  The file was committed.  Body contains the generated filename,
       the subfolder (if any) and the relative path to fetch it from
       GET /files/{path}.
  400  The upload was rejected — no file part, a disallowed extension,
       a file above the size ceiling, or an invalid subfolder.
  500  The file could not be written to disk.  Nothing is left behind.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.requests import ClientDisconnect

from filestore.core.constants import (
    MULTIPART_OVERHEAD_ALLOWANCE,
    SUBFOLDER_FIELD_NAME,
    UPLOAD_FIELD_NAME,
)
from filestore.core.exceptions import (
    AppBaseException,
    DiskError,
    MissingFileError,
    PathEscapeError,
    PolicyError,
    SizeExceededError,
)
from filestore.core.logger import get_logger
from filestore.models.upload_models import ErrorResponse, UploadResponse
from filestore.services.upload_service import upload_service

logger = get_logger(__name__)

router = APIRouter(tags=["Upload"])

# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(message: str, status: int = 400) -> JSONResponse:
    """Return a JSON error response with the standard error shape."""
    return JSONResponse(status_code=status, content={"error": message})


def _declared_body_size(request: Request) -> Optional[int]:
    raw = request.headers.get("content-length", "")
    return int(raw) if raw.isdigit() else None


# ── Endpoint ───────────────────────────────────────────────────────────────────

@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Upload a single file",
)
async def upload(request: Request) -> JSONResponse:
    """
    Accepts multipart/form-data with:

      file       (required) — the file to store.  Its extension must be in
                              ALLOWED_EXTENSIONS and it must not exceed
                              MAX_UPLOAD_SIZE bytes.
      subfolder  (optional) — '/'-separated folder below the upload
                              directory; created on demand.

      curl -F "file=@photo.png" -F "subfolder=albums/2024" http://localhost:3000/upload
    """
    # ── 1. Cheap size pre-check ────────────────────────────────────────────────
    declared = _declared_body_size(request)
    if declared is not None:
        try:
            upload_service.policy.check_size(declared - MULTIPART_OVERHEAD_ALLOWANCE)
        except SizeExceededError as exc:
            logger.warning("Upload rejected before parsing — Content-Length %d: %s", declared, exc)
            return _err(str(exc))

    # ── 2. Parse multipart form ────────────────────────────────────────────────
    try:
        form = await request.form()
    except ClientDisconnect:
        logger.warning("Client disconnected while sending the upload body.")
        return _err("Upload was interrupted before it completed.")
    except Exception:
        return _err("Invalid multipart/form-data payload.")

    try:
        # ── 3. Pick out the fields ─────────────────────────────────────────────
        file_part = form.get(UPLOAD_FIELD_NAME)
        subfolder = form.get(SUBFOLDER_FIELD_NAME)

        if subfolder is not None and not isinstance(subfolder, str):
            return _err(f"'{SUBFOLDER_FIELD_NAME}' must be a text field.")

        upload_file = file_part if isinstance(file_part, StarletteUploadFile) else None

        logger.info(
            "Upload request received — file=%s subfolder=%s",
            upload_file.filename if upload_file else None,
            subfolder or "-",
        )

        # ── 4. Delegate to service ─────────────────────────────────────────────
        try:
            stored = await upload_service.store_upload(upload_file, subfolder)

        except (MissingFileError, PolicyError, PathEscapeError) as exc:
            return _err(str(exc))

        except DiskError as exc:
            logger.exception("Upload failed while writing to disk: %s", exc)
            return _err("Failed to store uploaded file.", status=500)

        except AppBaseException as exc:
            logger.exception("Upload pipeline error: %s", exc)
            return _err("Failed to store uploaded file.", status=500)

        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error during upload: %s", exc)
            return _err("Failed to store uploaded file.", status=500)

    finally:
        await form.close()

    return JSONResponse(status_code=200, content=UploadResponse.from_stored(stored).model_dump())
