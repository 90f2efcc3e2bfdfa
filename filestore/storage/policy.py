"""
filestore/storage/policy.py

Upload policy: extension allow-list and size ceiling.
"""

from __future__ import annotations

import os
from typing import FrozenSet, Iterable, Optional

from filestore.core.constants import DEFAULT_MAX_UPLOAD_SIZE
from filestore.core.exceptions import ExtensionRejectedError, SizeExceededError


def _normalise(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


class PolicyValidator:
    """
    Checks a candidate upload against the allow-list and size ceiling.

    The allow-list is matched case-insensitively and without leading dots.
    An empty allow-list rejects every upload; files without an extension
    are accepted only when "" is explicitly allow-listed.
    """

    def __init__(
        self,
        allowed_extensions: Iterable[str],
        max_size: int = DEFAULT_MAX_UPLOAD_SIZE,
    ) -> None:
        self._allowed: FrozenSet[str] = frozenset(_normalise(e) for e in allowed_extensions)
        self._max_size = max_size

    @property
    def allowed_extensions(self) -> FrozenSet[str]:
        return self._allowed

    @property
    def max_size(self) -> int:
        return self._max_size

    @staticmethod
    def extension_of(filename: str) -> str:
        """
        Lower-case extension of the last path segment, without the dot.

        >>> PolicyValidator.extension_of("Report.Final.PDF")
        'pdf'
        >>> PolicyValidator.extension_of(".bashrc")
        ''
        """
        base = filename.replace("\\", "/").rsplit("/", 1)[-1]
        return os.path.splitext(base)[1].lstrip(".").lower()

    def validate(self, filename: str, declared_size: Optional[int] = None) -> str:
        """
        Validate an upload before any byte is stored.

        Args:
            filename      : Original client-side filename.
            declared_size : Size reported by the transport, or None if unknown.

        Returns:
            The normalised extension.

        Raises:
            ExtensionRejectedError: Extension not allow-listed.
            SizeExceededError:      Declared size above the ceiling.
        """
        ext = self.extension_of(filename)
        if ext not in self._allowed:
            shown = f"'.{ext}'" if ext else "without an extension"
            raise ExtensionRejectedError(f"File type {shown} is not allowed.")

        if declared_size is not None:
            self.check_size(declared_size)
        return ext

    def check_size(self, size: int) -> None:
        """
        Raises:
            SizeExceededError: If `size` is above the ceiling.
        """
        if size > self._max_size:
            raise SizeExceededError(
                f"File exceeds the maximum upload size of {self._max_size} bytes."
            )
