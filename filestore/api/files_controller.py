"""
filestore/api/files_controller.py

Read-side endpoints over the upload directory.

  GET /files, GET /list-files
      200  JSON array of every stored file, relative to the upload
           directory, '/'-separated, at any depth.
      500  The upload directory could not be read.

  GET /files/{path}
      200  The file's bytes, content type inferred from its extension.
      404  Nothing stored at that path.  Paths that try to leave the
           upload directory get the same answer.
"""

from typing import List

from fastapi import APIRouter
from fastapi.responses import FileResponse, JSONResponse

from filestore.core.exceptions import ListError, PathEscapeError, StoredFileNotFoundError
from filestore.core.logger import get_logger
from filestore.models.upload_models import ErrorResponse
from filestore.services.listing_service import directory_lister
from filestore.services.retrieval_service import retrieval_resolver

logger = get_logger(__name__)

router = APIRouter(tags=["Files"])


# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(message: str, status: int = 400) -> JSONResponse:
    """Return a JSON error response with the standard error shape."""
    return JSONResponse(status_code=status, content={"error": message})


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.get(
    "/files",
    response_model=List[str],
    responses={500: {"model": ErrorResponse}},
    summary="List stored files",
)
@router.get("/list-files", response_model=List[str], include_in_schema=False)
async def list_files() -> JSONResponse:
    """Every stored file below the upload directory, recursively."""
    try:
        files = await directory_lister.list_all()
    except ListError:
        return _err("Failed to read the upload directory.", status=500)

    logger.info("Listed %d stored file(s).", len(files))
    return JSONResponse(status_code=200, content=files)


@router.get(
    "/files/{path:path}",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Download a stored file",
    name="download_file",
)
async def download_file(path: str):
    """`path` is the value returned as `path` by POST /upload."""
    try:
        target = await retrieval_resolver.resolve(path)
    except PathEscapeError as exc:
        logger.warning("Refused file request for '%s' — %s", path, exc)
        return _err("File not found.", status=404)
    except StoredFileNotFoundError:
        return _err("File not found.", status=404)

    return FileResponse(target, media_type=retrieval_resolver.media_type_for(target))
