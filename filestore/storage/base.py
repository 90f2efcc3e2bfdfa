"""
filestore/storage/base.py

Shared data-transfer objects for the storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional


@dataclass(frozen=True)
class StoredFile:
    """
    A committed upload on disk.

    Attributes:
        relative_path : Path from the storage root, always '/'-separated
                        (e.g. "reports/2024/file-1718000000000000-42.pdf").
        size          : Number of bytes written.
        extension     : Lower-case extension without the dot ("" if none).
    """

    relative_path: str
    size: int
    extension: str

    @property
    def filename(self) -> str:
        """Generated name the file is stored under."""
        return PurePosixPath(self.relative_path).name

    @property
    def subfolder(self) -> Optional[str]:
        """Subfolder below the root, or None when stored at the root."""
        parent = PurePosixPath(self.relative_path).parent.as_posix()
        return None if parent == "." else parent
