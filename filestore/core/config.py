"""
filestore/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; the process environment wins over it.
"""

from pathlib import Path
from typing import FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict

from filestore.core.constants import DEFAULT_MAX_UPLOAD_SIZE, DEFAULT_STREAM_CHUNK_SIZE


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "File Upload & Storage API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = ""                             # e.g. "warning"; empty follows DEBUG

    # ── Server ─────────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # ── Storage ────────────────────────────────────────────────────────────────
    upload_directory: str = "uploads"
    public_directory: str = "public"

    # ── Upload policy ──────────────────────────────────────────────────────────
    allowed_extensions: str = ""                    # comma-separated, e.g. "png,pdf"
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE  # bytes

    # ── Streaming ──────────────────────────────────────────────────────────────
    io_timeout_seconds: float = 30.0
    stream_chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def upload_root(self) -> Path:
        """Absolute, canonical storage root."""
        return Path(self.upload_directory).expanduser().resolve()

    @property
    def allowed_extension_set(self) -> FrozenSet[str]:
        """
        ALLOWED_EXTENSIONS split on commas, lower-cased, without leading dots.
        Empty entries are dropped, so an unset variable rejects everything.
        """
        return frozenset(
            ext.strip().lstrip(".").lower()
            for ext in self.allowed_extensions.split(",")
            if ext.strip().lstrip(".")
        )


# Single shared instance — import this everywhere.
settings = Settings()
