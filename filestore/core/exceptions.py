"""
filestore/core/exceptions.py

Custom exception hierarchy for the application.

Raising typed exceptions from services lets controllers catch specific
cases and return the correct HTTP status code without leaking internals.
"""


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Upload intake exceptions ───────────────────────────────────────────────────

class MissingFileError(AppBaseException):
    """Raised when the request carries no usable 'file' part."""


class PolicyError(AppBaseException):
    """Raised when an upload violates the configured upload policy."""

    kind: str = "policy"


class ExtensionRejectedError(PolicyError):
    """Raised when the file extension is not in the allow-list."""

    kind = "extension_rejected"


class SizeExceededError(PolicyError):
    """Raised when the upload is larger than the configured ceiling."""

    kind = "size_exceeded"


# ── Storage exceptions ─────────────────────────────────────────────────────────

class PathEscapeError(AppBaseException):
    """Raised when a requested path is malformed or resolves outside the storage root."""


class DiskError(AppBaseException):
    """Raised when reading from or writing to the filesystem fails."""


class TransferTimeoutError(DiskError):
    """Raised when reading the upload body or writing it to disk stalls."""


class ListError(AppBaseException):
    """Raised when the storage root cannot be enumerated."""


class StoredFileNotFoundError(AppBaseException):
    """Raised when a requested file does not exist under the storage root."""
