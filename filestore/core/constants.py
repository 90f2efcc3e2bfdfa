"""
filestore/core/constants.py

Application-wide fixed constants.

These are part of the HTTP contract and the on-disk layout and are
NOT configurable via environment variables (the defaults below are).
"""

# ── Multipart form fields ──────────────────────────────────────────────────────

#: Name of the form field carrying the uploaded file.
UPLOAD_FIELD_NAME: str = "file"

#: Name of the optional text field selecting a destination subfolder.
SUBFOLDER_FIELD_NAME: str = "subfolder"

# ── Size limits ────────────────────────────────────────────────────────────────

#: Default upload ceiling: 5 MiB.
DEFAULT_MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024

#: Slack allowed on top of the ceiling for multipart boundaries and headers
#: when pre-checking the request Content-Length.
MULTIPART_OVERHEAD_ALLOWANCE: int = 64 * 1024

#: Default number of bytes read from the upload and written to disk at a time.
DEFAULT_STREAM_CHUNK_SIZE: int = 1024 * 1024

# ── On-disk layout ─────────────────────────────────────────────────────────────

#: Suffix of the hidden file an upload is streamed into before commit.
PARTIAL_SUFFIX: str = ".partial"

#: Content type used when none can be inferred from the extension.
DEFAULT_MEDIA_TYPE: str = "application/octet-stream"
