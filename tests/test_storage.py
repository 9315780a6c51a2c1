"""
Unit tests for AttachmentStorage (uploaded files on disk)
"""

import asyncio
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from app.services.storage import (
    AttachmentStorage,
    UploadRejected,
    generate_name,
    safe_ext,
)


def _upload(name: str, data: bytes, content_type: str = "application/pdf", size=None) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=name,
        size=size,
        headers=Headers({"content-type": content_type}) if content_type else Headers({}),
    )


@pytest.fixture
def small_storage(tmp_path):
    return AttachmentStorage(tmp_path / "files", max_bytes=1024, allowed_exts={".pdf", ".txt", ".png"})


def test_safe_ext():
    assert safe_ext("Report.PDF") == ".pdf"
    assert safe_ext("noext") == ""
    assert safe_ext("weird.abcdefghijkl") == ""


def test_generate_name_keeps_base_and_extension():
    name = generate_name("숫자 놀이.pdf")

    assert name.startswith("숫자_놀이-")
    assert name.endswith(".pdf")


def test_generate_name_collapses_punctuation_and_drops_directories():
    name = generate_name("../보고서 (최종)!.pdf")

    assert name.startswith("보고서_최종-")
    assert "/" not in name and " " not in name
    assert name.endswith(".pdf")


def test_generate_name_is_unique():
    names = {generate_name("a.pdf") for _ in range(200)}
    assert len(names) == 200


def test_generate_name_strips_directories():
    name = generate_name("../../etc/passwd.txt")
    assert "/" not in name
    assert name.startswith("passwd-")


def test_save_upload_writes_file(small_storage):
    stored = asyncio.run(small_storage.save_upload(_upload("notes.pdf", b"%PDF-1.4 hello")))

    assert stored.original_name == "notes.pdf"
    assert stored.file_size == len(b"%PDF-1.4 hello")
    assert stored.file_type == "application/pdf"
    assert stored.path.read_bytes() == b"%PDF-1.4 hello"
    assert small_storage.exists(stored.file_name)


def test_save_upload_guesses_missing_content_type(small_storage):
    stored = asyncio.run(small_storage.save_upload(_upload("readme.txt", b"hi", content_type=None)))
    assert stored.file_type == "text/plain"


def test_save_upload_rejects_extension(small_storage):
    with pytest.raises(UploadRejected, match="File type not allowed"):
        asyncio.run(small_storage.save_upload(_upload("script.exe", b"MZ")))

    assert not small_storage.base_dir.exists() or list(small_storage.base_dir.iterdir()) == []


def test_save_upload_rejects_missing_file(small_storage):
    with pytest.raises(UploadRejected, match="No file uploaded"):
        asyncio.run(small_storage.save_upload(None))


def test_save_upload_rejects_oversize_while_streaming(small_storage):
    # size unknown up front: the limit is enforced on the bytes actually read
    with pytest.raises(UploadRejected, match="limit"):
        asyncio.run(small_storage.save_upload(_upload("big.pdf", b"x" * 2048)))

    assert list(small_storage.base_dir.iterdir()) == []


def test_save_upload_rejects_announced_oversize(small_storage):
    with pytest.raises(UploadRejected, match="limit"):
        asyncio.run(small_storage.save_upload(_upload("big.pdf", b"x" * 10, size=4096)))


def test_discard_removes_file_and_ignores_missing(small_storage):
    stored = asyncio.run(small_storage.save_upload(_upload("notes.pdf", b"data")))

    small_storage.discard(stored.file_name)
    small_storage.discard(stored.file_name)

    assert not stored.path.exists()


def test_path_for_never_leaves_base_dir(small_storage):
    path = small_storage.path_for("../outside.pdf")
    assert path.parent == small_storage.base_dir
