import logging
import mimetypes
import os
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import Settings, allowed_upload_exts, max_upload_bytes

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


class UploadRejected(ValueError):
    """Upload refused before anything is kept on disk (missing file, type, size)."""


@dataclass
class StoredFile:
    file_name: str
    original_name: str
    file_size: int
    file_type: str
    path: Path


def safe_ext(filename: str) -> str:
    name = (filename or "").strip()
    ext = os.path.splitext(name)[1].lower()
    if not ext or len(ext) > 10:
        return ""
    return ext


def _safe_base(original: str) -> str:
    base = Path(original or "").stem
    base = re.sub(r"[^\w.-]+", "_", base)[:80].strip("._") or "file"
    return base


def generate_name(original: str) -> str:
    """
    <base>-<timestamp ns>-<random><ext>, unique within the upload dir.
    The extension is kept as sent; only the base name is sanitised.
    """
    ext = os.path.splitext(Path(original or "").name)[1]
    suffix = f"{time.time_ns()}-{random.randint(0, 10**9)}"
    return f"{_safe_base(original)}-{suffix}{ext}"


def guess_type(upload: UploadFile) -> str:
    ct = (upload.content_type or "").strip().lower()
    if ct:
        return ct
    guessed, _ = mimetypes.guess_type(upload.filename or "")
    return guessed or "application/octet-stream"


class AttachmentStorage:
    """
    Uploaded files bound to learning resources.
    One flat directory shared by every request; names are generated unique
    so concurrent writes never collide.
    """

    def __init__(self, base_dir, max_bytes: int, allowed_exts: set[str]):
        self.base_dir = Path(base_dir).resolve()
        self.max_bytes = max_bytes
        self.allowed_exts = allowed_exts

    @classmethod
    def from_settings(cls, settings: Settings) -> "AttachmentStorage":
        return cls(
            settings.UPLOAD_DIR,
            max_bytes=max_upload_bytes(settings),
            allowed_exts=allowed_upload_exts(settings),
        )

    def ensure_dir(self) -> Path:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self.base_dir

    def path_for(self, file_name: str) -> Path:
        # stored names never carry directories
        return self.base_dir / Path(file_name).name

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    def check_upload(self, upload: Optional[UploadFile]) -> None:
        if upload is None or not (upload.filename or "").strip():
            raise UploadRejected("No file uploaded")

        if safe_ext(upload.filename) not in self.allowed_exts:
            raise UploadRejected(
                "File type not allowed. Please upload PDF, Office documents, "
                "images, videos, or audio files."
            )

        # size announced by the client, checked again while streaming
        if upload.size is not None and upload.size > self.max_bytes:
            raise UploadRejected(self._too_large_message())

    def _too_large_message(self) -> str:
        return f"File exceeds the {self.max_bytes // (1024 * 1024)}MB limit."

    async def save_upload(self, upload: Optional[UploadFile]) -> StoredFile:
        self.check_upload(upload)

        self.ensure_dir()
        new_name = generate_name(upload.filename)
        dst = self.path_for(new_name)

        total = 0
        try:
            with dst.open("xb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total += len(chunk)
                    if total > self.max_bytes:
                        raise UploadRejected(self._too_large_message())
                    out.write(chunk)
        except BaseException:
            dst.unlink(missing_ok=True)
            raise

        logger.info("Stored upload %s (%d bytes) as %s", upload.filename, total, new_name)
        return StoredFile(
            file_name=new_name,
            original_name=upload.filename,
            file_size=total,
            file_type=guess_type(upload),
            path=dst,
        )

    def discard(self, file_name: str) -> None:
        """
        Removes an upload that ended up without a record.
        Failures are logged only: the caller already has a primary error to report.
        """
        try:
            self.path_for(file_name).unlink(missing_ok=True)
            logger.info("Removed orphaned upload %s", file_name)
        except OSError:
            logger.exception("Error deleting uploaded file %s", file_name)
