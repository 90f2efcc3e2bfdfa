"""
tests/api/test_upload_api.py

HTTP-level tests for POST /upload.

Runs against the real app with the upload directory pointed at a temp
dir (see conftest.py): allow-list {png, pdf, txt}, 1 KiB ceiling.
"""

import errno
import io
from pathlib import Path
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from starlette.requests import ClientDisconnect, Request

from filestore.services.upload_service import upload_service


# ── Helpers ────────────────────────────────────────────────────────────────────

def _part(filename: str, content: bytes = b"hello", content_type: str = "application/octet-stream") -> tuple:
    return ("file", (filename, io.BytesIO(content), content_type))


def _files_on_disk(root: Path) -> list:
    """Every regular file below root, hidden partial files included."""
    return sorted(p for p in root.rglob("*") if p.is_file())


# ── Happy path ─────────────────────────────────────────────────────────────────

class TestUploadAccepted:

    def test_allowed_file_returns_200(self, client: TestClient, upload_root: Path, sample_png_file) -> None:
        response = client.post("/upload", files=[sample_png_file])
        assert response.status_code == 200

    def test_response_shape(self, client: TestClient, upload_root: Path, sample_png_file) -> None:
        body = client.post("/upload", files=[sample_png_file]).json()
        assert set(body) == {"message", "filename", "subfolder", "path", "size"}
        assert body["subfolder"] is None
        assert body["path"] == body["filename"]
        assert body["filename"] in body["message"]

    def test_stored_name_is_generated_not_original(
        self, client: TestClient, upload_root: Path, sample_png_file
    ) -> None:
        body = client.post("/upload", files=[sample_png_file]).json()
        assert body["filename"] != "photo.png"
        assert body["filename"].startswith("file-")
        assert body["filename"].endswith(".png")

    def test_exactly_one_file_written_with_uploaded_bytes(
        self, client: TestClient, upload_root: Path
    ) -> None:
        body = client.post("/upload", files=[_part("notes.txt", b"some notes")]).json()

        assert _files_on_disk(upload_root) == [upload_root / body["path"]]
        assert (upload_root / body["path"]).read_bytes() == b"some notes"
        assert body["size"] == len(b"some notes")

    def test_extension_check_is_case_insensitive(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", files=[_part("SCAN.PDF")])
        assert response.status_code == 200
        assert response.json()["filename"].endswith(".pdf")

    def test_subfolder_is_created_and_reported(self, client: TestClient, upload_root: Path) -> None:
        response = client.post(
            "/upload",
            files=[_part("a.txt")],
            data={"subfolder": "albums/2024"},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["subfolder"] == "albums/2024"
        assert body["path"] == f"albums/2024/{body['filename']}"
        assert (upload_root / "albums" / "2024" / body["filename"]).is_file()

    def test_blank_subfolder_stores_at_root(self, client: TestClient, upload_root: Path) -> None:
        body = client.post("/upload", files=[_part("a.txt")], data={"subfolder": "  "}).json()
        assert body["subfolder"] is None
        assert (upload_root / body["filename"]).is_file()

    def test_same_original_name_twice_gives_two_files(self, client: TestClient, upload_root: Path) -> None:
        first = client.post("/upload", files=[_part("same.txt", b"one")]).json()
        second = client.post("/upload", files=[_part("same.txt", b"two")]).json()

        assert first["path"] != second["path"]
        assert client.get(f"/files/{first['path']}").content == b"one"
        assert client.get(f"/files/{second['path']}").content == b"two"
        assert sorted(client.get("/list-files").json()) == sorted([first["path"], second["path"]])


# ── Rejections ─────────────────────────────────────────────────────────────────

class TestUploadRejected:

    def test_disallowed_extension_returns_400(
        self, client: TestClient, upload_root: Path, sample_exe_file
    ) -> None:
        response = client.post("/upload", files=[sample_exe_file])

        assert response.status_code == 400
        assert "not allowed" in response.json()["error"]
        assert _files_on_disk(upload_root) == []

    def test_file_without_extension_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", files=[_part("Makefile")])
        assert response.status_code == 400
        assert _files_on_disk(upload_root) == []

    def test_disallowed_extension_creates_no_subfolder(
        self, client: TestClient, upload_root: Path, sample_exe_file
    ) -> None:
        client.post("/upload", files=[sample_exe_file], data={"subfolder": "new/folder"})
        assert not (upload_root / "new").exists()

    def test_missing_file_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", data={"subfolder": "docs"})

        assert response.status_code == 400
        assert response.json()["error"] == "No file was uploaded."
        assert not (upload_root / "docs").exists()

    def test_file_sent_as_text_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", data={"file": "not really a file"})
        assert response.status_code == 400

    def test_file_in_wrong_field_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post(
            "/upload", files=[("document", ("a.txt", io.BytesIO(b"x"), "text/plain"))]
        )
        assert response.status_code == 400
        assert _files_on_disk(upload_root) == []

    def test_file_above_ceiling_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", files=[_part("big.txt", b"x" * 2048)])

        assert response.status_code == 400
        assert "maximum upload size" in response.json()["error"]
        assert _files_on_disk(upload_root) == []

    def test_file_at_ceiling_is_accepted(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", files=[_part("edge.txt", b"x" * 1024)])
        assert response.status_code == 200

    def test_huge_body_rejected_before_parsing(self, client: TestClient, upload_root: Path) -> None:
        response = client.post("/upload", files=[_part("huge.txt", b"x" * (200 * 1024))])

        assert response.status_code == 400
        assert "maximum upload size" in response.json()["error"]
        assert _files_on_disk(upload_root) == []

    def test_traversal_subfolder_returns_400(
        self, client: TestClient, upload_root: Path, outside_dir: Path
    ) -> None:
        response = client.post(
            "/upload", files=[_part("a.txt")], data={"subfolder": "../outside"}
        )

        assert response.status_code == 400
        assert list(outside_dir.iterdir()) == []

    def test_absolute_subfolder_returns_400(
        self, client: TestClient, upload_root: Path, outside_dir: Path
    ) -> None:
        response = client.post(
            "/upload", files=[_part("a.txt")], data={"subfolder": str(outside_dir)}
        )

        assert response.status_code == 400
        assert list(outside_dir.iterdir()) == []

    def test_dot_dot_subfolder_returns_400_even_inside_root(
        self, client: TestClient, upload_root: Path
    ) -> None:
        response = client.post("/upload", files=[_part("a.txt")], data={"subfolder": "a/../b"})

        assert response.status_code == 400
        assert "'..'" in response.json()["error"]
        assert list(upload_root.iterdir()) == []

    def test_backslash_subfolder_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post(
            "/upload", files=[_part("a.txt")], data={"subfolder": "..\\..\\windows"}
        )
        assert response.status_code == 400

    def test_malformed_multipart_returns_400(self, client: TestClient, upload_root: Path) -> None:
        response = client.post(
            "/upload",
            content=b"--abc\r\nthis is not multipart",
            headers={"content-type": "multipart/form-data; boundary=abc"},
        )
        assert response.status_code == 400


# ── Failures ───────────────────────────────────────────────────────────────────

class TestUploadFailed:

    def test_disk_full_returns_500_and_leaves_nothing(
        self, client: TestClient, upload_root: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(
            upload_service,
            "_write_chunk",
            MagicMock(side_effect=OSError(errno.ENOSPC, "No space left on device")),
        )

        response = client.post("/upload", files=[_part("a.txt", b"payload")])

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to store uploaded file."}
        assert _files_on_disk(upload_root) == []
        assert client.get("/list-files").json() == []

    def test_client_disconnect_during_body_returns_400(
        self, client: TestClient, upload_root: Path, monkeypatch
    ) -> None:
        async def _disconnect(self, *args, **kwargs):
            raise ClientDisconnect()

        monkeypatch.setattr(Request, "form", _disconnect)

        response = client.post("/upload", files=[_part("a.txt", b"payload")])

        assert response.status_code == 400
        assert response.json() == {"error": "Upload was interrupted before it completed."}
        assert _files_on_disk(upload_root) == []
