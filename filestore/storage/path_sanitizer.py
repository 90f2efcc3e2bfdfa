"""
filestore/storage/path_sanitizer.py

Resolves user-supplied subfolders and filenames against the storage root.

Responsibility: turn an untrusted relative path into an absolute path that
is guaranteed to sit at or below the root, creating the destination
directory on demand. Anything that is malformed or escapes the root is
rejected, never silently rewritten.
"""

from __future__ import annotations

import unicodedata
from pathlib import Path, PurePosixPath
from typing import Optional

from filestore.core.exceptions import DiskError, PathEscapeError
from filestore.core.logger import get_logger

logger = get_logger(__name__)

# Slash and backslash look-alikes that some clients, filesystems or
# normalisers turn into real separators.
_CONFUSABLE_SEPARATORS = frozenset(
    "\\"
    "⁄"  # FRACTION SLASH
    "∕"  # DIVISION SLASH
    "∖"  # SET MINUS
    "⧵"  # REVERSE SOLIDUS OPERATOR
    "⧸"  # BIG SOLIDUS
    "⧹"  # BIG REVERSE SOLIDUS
    "﹨"  # SMALL REVERSE SOLIDUS
    "／"  # FULLWIDTH SOLIDUS
    "＼"  # FULLWIDTH REVERSE SOLIDUS
)


def _is_confusable_separator(ch: str) -> bool:
    if ch in _CONFUSABLE_SEPARATORS:
        return True
    normalised = unicodedata.normalize("NFKC", ch)
    return ch != "/" and ("/" in normalised or "\\" in normalised)


def check_relative_path(value: str, what: str = "path") -> PurePosixPath:
    """
    Validate the syntax of an untrusted relative path.

    Rejects NUL bytes and other control characters, backslashes and other
    separator look-alikes, absolute paths and any '..' segment, even one
    that would resolve back inside the root. Symlink escapes are caught
    separately by `contain`.

    Raises:
        PathEscapeError: If the value cannot be used as a relative path.
    """
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in value):
        raise PathEscapeError(f"Invalid {what}: control characters are not allowed.")
    if any(_is_confusable_separator(ch) for ch in value):
        raise PathEscapeError(f"Invalid {what}: only '/' may be used as a separator.")

    candidate = PurePosixPath(value)
    if candidate.is_absolute():
        raise PathEscapeError(f"Invalid {what}: absolute paths are not allowed.")
    if ".." in candidate.parts:
        raise PathEscapeError(f"Invalid {what}: '..' segments are not allowed.")
    return candidate


def contain(root: Path, candidate: Path, what: str = "path") -> Path:
    """
    Canonicalise `candidate` and make sure it is `root` or lives below it.

    Symlinks are followed, so a link inside the root that points elsewhere
    is treated as an escape.

    Raises:
        PathEscapeError: If the canonical path leaves the root.
    """
    resolved = candidate.resolve()
    try:
        resolved.relative_to(root)
    except ValueError as exc:
        raise PathEscapeError(f"Invalid {what}: resolves outside the storage root.") from exc
    return resolved


class PathSanitizer:
    """
    Write-side path resolution bound to a single storage root.

    The root is canonicalised once at construction; every path handed out
    is below it.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve_directory(self, subfolder: Optional[str]) -> Path:
        """
        Resolve `subfolder` below the root and create it if missing.

        Args:
            subfolder : None, "" or a '/'-separated relative path.

        Returns:
            The absolute destination directory.

        Raises:
            PathEscapeError: Malformed subfolder or traversal outside the root.
            DiskError:       The directory could not be created.
        """
        subfolder = (subfolder or "").strip()
        relative = PurePosixPath()
        if subfolder:
            relative = check_relative_path(subfolder, what="subfolder")
            contain(self._root, self._root / relative, what="subfolder")

        # One level at a time, re-checking containment after each mkdir, so a
        # symlink swapped in mid-request is never used to create directories
        # outside the root.
        current = self._root
        try:
            current.mkdir(parents=True, exist_ok=True)
            for part in relative.parts:
                current = current / part
                # exist_ok: concurrent uploads may race to create the same folder.
                current.mkdir(exist_ok=True)
                contain(self._root, current, what="subfolder")
        except OSError as exc:
            raise DiskError(f"Could not create directory '{subfolder}': {exc}") from exc

        return contain(self._root, current, what="subfolder")

    def resolve(self, subfolder: Optional[str], filename: str) -> Path:
        """
        Return the absolute path `filename` should be written to.

        Raises:
            PathEscapeError: If `filename` is not a single plain segment or
                             `subfolder` escapes the root.
            DiskError:       If the destination directory cannot be created.
        """
        name = check_relative_path(filename, what="filename")
        if len(name.parts) != 1 or name.name in ("", ".", ".."):
            raise PathEscapeError(f"Invalid filename '{filename}'.")

        directory = self.resolve_directory(subfolder)
        return directory / name.name

    def relative(self, path: Path) -> str:
        """'/'-separated path of `path` relative to the root ("" for the root itself)."""
        relative = path.relative_to(self._root).as_posix()
        return "" if relative == "." else relative
