"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

The environment is pointed at a throw-away upload directory *before* the
app is imported, because settings and the service singletons are built
at import time.
"""

import io
import os
import shutil
import tempfile
from pathlib import Path

import pytest

_UPLOAD_ROOT = Path(tempfile.mkdtemp(prefix="filestore-tests-")).resolve()

os.environ["UPLOAD_DIRECTORY"] = str(_UPLOAD_ROOT / "uploads")
os.environ["ALLOWED_EXTENSIONS"] = "png,pdf,txt"
os.environ["MAX_UPLOAD_SIZE"] = "1024"
os.environ["PUBLIC_DIRECTORY"] = str(_UPLOAD_ROOT / "public")

from fastapi.testclient import TestClient  # noqa: E402

from filestore.main import app  # noqa: E402


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run.
    The lifespan context (which creates the upload directory) is entered
    automatically.
    """
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    shutil.rmtree(_UPLOAD_ROOT, ignore_errors=True)


@pytest.fixture
def upload_root(client: TestClient) -> Path:
    """The upload directory the app under test writes to, emptied before each test."""
    root = _UPLOAD_ROOT / "uploads"
    root.mkdir(parents=True, exist_ok=True)
    for child in root.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    return root


@pytest.fixture
def outside_dir(upload_root: Path) -> Path:
    """A directory next to (not inside) the upload directory, emptied before each test."""
    path = upload_root.parent / "outside"
    shutil.rmtree(path, ignore_errors=True)
    path.mkdir()
    return path


# ── Sample file fixtures ───────────────────────────────────────────────────────

def _file_part(filename: str, content: bytes = b"\x89PNG\r\n\x1a\n", content_type: str = "image/png") -> tuple:
    """
    A (field_name, (filename, file_obj, content_type)) tuple ready for
    use with TestClient's `files=` parameter.
    """
    return ("file", (filename, io.BytesIO(content), content_type))


@pytest.fixture
def sample_png_file() -> tuple:
    return _file_part("photo.png")


@pytest.fixture
def sample_exe_file() -> tuple:
    """A disallowed upload tuple for negative-case tests."""
    return _file_part("evil.exe", b"MZ\x90\x00", "application/octet-stream")
