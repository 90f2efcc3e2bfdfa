"""
filestore/services/retrieval_service.py

Maps a requested relative path back to a stored file.

Uses the same canonicalisation and containment rules as the write side,
without creating anything. Callers should answer escapes exactly like
missing files so the layout outside the root is never revealed.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from filestore.core.config import settings
from filestore.core.constants import DEFAULT_MEDIA_TYPE, PARTIAL_SUFFIX
from filestore.core.exceptions import StoredFileNotFoundError
from filestore.core.logger import get_logger
from filestore.storage.path_sanitizer import check_relative_path, contain

logger = get_logger(__name__)


class RetrievalResolver:
    """Read-side path resolution bound to a single storage root."""

    def __init__(self, root: Path | str | None = None) -> None:
        self._root = Path(root or settings.upload_root).resolve()

    async def resolve(self, relative_path: str) -> Path:
        return await run_in_threadpool(self.resolve_sync, relative_path)

    def resolve_sync(self, relative_path: str) -> Path:
        """
        Args:
            relative_path : '/'-separated path below the root, as requested.

        Returns:
            Absolute path of an existing regular file under the root.

        Raises:
            PathEscapeError:         Malformed path or one that leaves the root.
            StoredFileNotFoundError: Nothing servable at that path.
        """
        if not relative_path.strip():
            raise StoredFileNotFoundError("No file requested.")

        relative = check_relative_path(relative_path)
        target = contain(self._root, self._root / relative)

        try:
            is_file = target != self._root and target.is_file()
        except OSError as exc:
            raise StoredFileNotFoundError(f"'{relative_path}' cannot be read: {exc}") from exc
        if not is_file:
            raise StoredFileNotFoundError(f"'{relative_path}' does not exist.")
        if target.name.startswith(".") and target.name.endswith(PARTIAL_SUFFIX):
            raise StoredFileNotFoundError(f"'{relative_path}' is not committed yet.")

        logger.debug("Resolved '%s' → '%s'.", relative_path, target)
        return target

    @staticmethod
    def media_type_for(path: Path) -> str:
        """Content type inferred from the file extension."""
        guessed, _ = mimetypes.guess_type(path.name)
        return guessed or DEFAULT_MEDIA_TYPE


# ── Module-level singleton ─────────────────────────────────────────────────────

retrieval_resolver = RetrievalResolver()
