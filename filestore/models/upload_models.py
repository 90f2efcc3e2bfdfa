"""
filestore/models/upload_models.py

Pydantic DTOs for the upload flow.
The request has no DTO — the multipart form is parsed in the controller;
only the response shape is defined here.
"""

from typing import Optional

from pydantic import BaseModel

from filestore.storage.base import StoredFile


class UploadResponse(BaseModel):
    """
    Successful response for POST /upload.

        {
            "message": "File uploaded successfully: file-1718000000000000-42.pdf",
            "filename": "file-1718000000000000-42.pdf",
            "subfolder": "reports/2024",
            "path": "reports/2024/file-1718000000000000-42.pdf",
            "size": 1024
        }

    `path` is what GET /files/{path} expects.
    """

    message: str
    filename: str
    subfolder: Optional[str] = None
    path: str
    size: int

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "UploadResponse":
        return cls(
            message=f"File uploaded successfully: {stored.filename}",
            filename=stored.filename,
            subfolder=stored.subfolder,
            path=stored.relative_path,
            size=stored.size,
        )


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint: { "error": "..." }"""

    error: str
