"""
filestore/services/upload_service.py

Orchestrates the upload intake pipeline for a single file:

    UploadFile + subfolder
      └─ PolicyValidator.validate()      extension / declared size
           └─ UniqueNameGenerator.generate()
                └─ PathSanitizer.resolve()   → destination (dirs created)
                     └─ stream → .<name>.partial → fsync → os.replace  (commit)

Each request moves through Receiving → Validating → Writing and ends in
exactly one of Committed, Rejected or Failed. Bytes are streamed into a
hidden partial file next to the destination and only renamed into place
once fully written, so a failed or cancelled upload never leaves a file
behind that listing or retrieval would pick up.

All collaborators are constructor-injected so tests can point the
service at a temporary root; the module-level singleton wires in the
configured production values.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import BinaryIO, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from filestore.core.config import settings
from filestore.core.constants import PARTIAL_SUFFIX, UPLOAD_FIELD_NAME
from filestore.core.exceptions import (
    DiskError,
    MissingFileError,
    PathEscapeError,
    PolicyError,
    TransferTimeoutError,
)
from filestore.core.logger import get_logger
from filestore.storage.base import StoredFile
from filestore.storage.naming import UniqueNameGenerator
from filestore.storage.path_sanitizer import PathSanitizer
from filestore.storage.policy import PolicyValidator

logger = get_logger(__name__)


def partial_path_for(destination: Path) -> Path:
    """Hidden sibling an upload is streamed into before it is committed."""
    return destination.with_name(f".{destination.name}{PARTIAL_SUFFIX}")


class UploadService:
    """
    Validates, names and durably stores one uploaded file.

    Design choices:
    - **Validate before touching disk**: the policy check runs before the
      destination directory is created, so rejected uploads leave no trace.
    - **Commit by rename**: the final name only ever refers to a complete,
      fsync'ed file.
    - **Bounded I/O**: every read from the request and every write to disk
      is subject to `io_timeout`.
    """

    def __init__(
        self,
        root: Path | str | None = None,
        policy: PolicyValidator | None = None,
        sanitizer: PathSanitizer | None = None,
        namer: UniqueNameGenerator | None = None,
        io_timeout: float | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self._sanitizer: PathSanitizer = sanitizer or PathSanitizer(root or settings.upload_root)
        self._policy: PolicyValidator = policy or PolicyValidator(
            settings.allowed_extension_set, settings.max_upload_size
        )
        self._namer: UniqueNameGenerator = namer or UniqueNameGenerator()
        self._io_timeout: float = io_timeout if io_timeout is not None else settings.io_timeout_seconds
        self._chunk_size: int = chunk_size or settings.stream_chunk_size

    @property
    def policy(self) -> PolicyValidator:
        return self._policy

    # ── Public API ─────────────────────────────────────────────────────────────

    async def store_upload(
        self,
        upload: Optional[UploadFile],
        subfolder: Optional[str] = None,
        field_name: str = UPLOAD_FIELD_NAME,
    ) -> StoredFile:
        """
        Run the pipeline for one uploaded file.

        Args:
            upload     : The multipart file part, or None if the request had none.
            subfolder  : Optional '/'-separated folder below the storage root.
            field_name : Form field the file arrived in; prefixes the stored name.

        Returns:
            The committed StoredFile.

        Raises:
            MissingFileError: No file part, or one without a filename.
            PolicyError:      Extension not allowed or file too large.
            PathEscapeError:  Subfolder is malformed or leaves the root.
            DiskError:        Writing failed or timed out; nothing is left on disk.
        """
        if upload is None or not upload.filename:
            logger.warning("Upload rejected — no file part in field '%s'.", field_name)
            raise MissingFileError("No file was uploaded.")

        original = upload.filename
        logger.debug("Receiving '%s' (declared size=%s).", original, upload.size)

        # ── Validating ─────────────────────────────────────────────────────────
        try:
            ext = self._policy.validate(original, upload.size)
            stored_name = self._namer.generate(field_name, ext)
            destination = await run_in_threadpool(
                self._sanitizer.resolve, subfolder, stored_name
            )
        except (PolicyError, PathEscapeError) as exc:
            logger.warning("Upload '%s' rejected — %s", original, exc)
            raise

        # ── Writing ────────────────────────────────────────────────────────────
        logger.debug("Writing '%s' → '%s'.", original, destination)
        try:
            size = await self._write(upload, destination)
        except PolicyError as exc:
            logger.warning("Upload '%s' rejected while streaming — %s", original, exc)
            raise

        stored = StoredFile(
            relative_path=self._sanitizer.relative(destination),
            size=size,
            extension=ext,
        )
        logger.info(
            "Upload committed — '%s' stored as '%s' (%d bytes).",
            original,
            stored.relative_path,
            size,
        )
        return stored

    # ── Internals ──────────────────────────────────────────────────────────────

    async def _write(self, upload: UploadFile, destination: Path) -> int:
        """
        Stream `upload` into a partial file and rename it to `destination`.

        Returns:
            Number of bytes committed.

        Raises:
            SizeExceededError: The streamed body grew past the ceiling.
            DiskError:         Filesystem failure or I/O timeout.
        """
        partial = partial_path_for(destination)
        committed = False
        handle: Optional[BinaryIO] = None
        written = 0

        try:
            try:
                handle = await run_in_threadpool(partial.open, "wb")
            except OSError as exc:
                raise DiskError(f"Could not open '{partial.name}' for writing: {exc}") from exc

            while True:
                chunk = await self._with_timeout(upload.read(self._chunk_size), "reading upload")
                if not chunk:
                    break
                written += len(chunk)
                self._policy.check_size(written)
                await self._with_timeout(
                    run_in_threadpool(self._write_chunk, handle, chunk), "writing to disk"
                )

            await self._with_timeout(run_in_threadpool(self._flush, handle), "flushing to disk")
            await run_in_threadpool(handle.close)
            handle = None

            try:
                # os.replace overwrites: a name clash keeps the later upload.
                await run_in_threadpool(os.replace, partial, destination)
            except OSError as exc:
                raise DiskError(f"Could not commit '{destination.name}': {exc}") from exc

            committed = True
            return written

        except OSError as exc:
            raise DiskError(f"Failed to write '{destination.name}': {exc}") from exc

        finally:
            if not committed:
                # Closing may wait behind a write still running in the pool;
                # shielded so a second cancellation cannot skip the unlink.
                await asyncio.shield(run_in_threadpool(self._discard, handle, partial))
            await upload.close()

    def _write_chunk(self, handle: BinaryIO, chunk: bytes) -> None:
        handle.write(chunk)

    @staticmethod
    def _flush(handle: BinaryIO) -> None:
        handle.flush()
        os.fsync(handle.fileno())

    async def _with_timeout(self, awaitable, action: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self._io_timeout)
        except asyncio.TimeoutError as exc:
            raise TransferTimeoutError(
                f"Timed out after {self._io_timeout:g}s while {action}."
            ) from exc

    @staticmethod
    def _discard(handle: Optional[BinaryIO], partial: Path) -> None:
        """Best-effort removal of an uncommitted partial file."""
        if handle is not None:
            try:
                handle.close()
            except OSError as exc:
                logger.error("Could not close partial file '%s': %s", partial, exc)
        try:
            partial.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove partial file '%s': %s", partial, exc)
        else:
            logger.info("Discarded partial upload '%s'.", partial.name)


# ── Module-level singleton ─────────────────────────────────────────────────────
# Controllers import this instance.  Tests construct UploadService directly
# against a temporary root.

upload_service = UploadService()
