"""
filestore/services/listing_service.py

Recursive listing of everything stored under the storage root.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from fastapi.concurrency import run_in_threadpool

from filestore.core.config import settings
from filestore.core.constants import PARTIAL_SUFFIX
from filestore.core.exceptions import ListError
from filestore.core.logger import get_logger

logger = get_logger(__name__)


class DirectoryLister:
    """
    Enumerates stored files below a root, at any depth.

    Paths are returned relative to the root, '/'-separated and sorted.
    Directories themselves are not listed. Symbolic links are skipped, so
    a link loop cannot make the walk recurse forever, and so are the
    hidden partial files of uploads still in flight.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        self._root = Path(root or settings.upload_root).resolve()

    async def list_all(self) -> List[str]:
        """
        Raises:
            ListError: If the root or one of its subdirectories is unreadable.
        """
        return await run_in_threadpool(self.list_all_sync)

    def list_all_sync(self) -> List[str]:
        results: List[str] = []
        try:
            self._walk(self._root, "", results)
        except OSError as exc:
            logger.exception("Failed to list '%s': %s", self._root, exc)
            raise ListError(f"Could not read the upload directory: {exc.strerror or exc}") from exc

        results.sort()
        logger.debug("Listed %d file(s) under '%s'.", len(results), self._root)
        return results

    def _walk(self, directory: Path, prefix: str, results: List[str]) -> None:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_symlink():
                    continue
                relative = f"{prefix}{entry.name}"
                if entry.is_dir(follow_symlinks=False):
                    self._walk(Path(entry.path), f"{relative}/", results)
                elif entry.is_file(follow_symlinks=False):
                    if _is_partial(entry.name):
                        continue
                    results.append(relative)


def _is_partial(name: str) -> bool:
    return name.startswith(".") and name.endswith(PARTIAL_SUFFIX)


# ── Module-level singleton ─────────────────────────────────────────────────────

directory_lister = DirectoryLister()
