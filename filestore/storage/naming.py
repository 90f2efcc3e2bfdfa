"""
filestore/storage/naming.py

Generates the names uploads are stored under.

Stored names never reuse the client's filename, so two uploads of
"photo.png" always land in different files. There is no retry on a
clash: if two names ever coincide the later commit replaces the earlier
file.
"""

from __future__ import annotations

import secrets
import time

_RANDOM_UPPER_BOUND = 1_000_000_000


class UniqueNameGenerator:
    """Builds "<field>-<timestamp>-<random>.<ext>" names."""

    def generate(self, field_name: str, extension: str) -> str:
        """
        Args:
            field_name : Multipart field the file arrived in (e.g. "file").
            extension  : Normalised extension without the dot; may be "".

        Returns:
            A new filename; the dot is omitted when `extension` is empty.
        """
        token = f"{time.time_ns() // 1000}-{secrets.randbelow(_RANDOM_UPPER_BOUND)}"
        name = f"{field_name}-{token}"
        return f"{name}.{extension}" if extension else name
