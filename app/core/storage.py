"""
Local-disk storage for uploaded binaries.

Files land in ``<root>/<user>/<ms-timestamp>-<sanitized-name>``; the path
recorded on the asset is the part after ``<root>``, always with forward
slashes.
"""
import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request, UploadFile

from app.core.exceptions import ValidationFailed


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# 64KB chunk size for network IO
CHUNK_SIZE = 64 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(name: str, fallback: str = "upload") -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    cleaned = _UNSAFE_CHARS.sub("_", name or "")
    # "." / ".." 不能作为路径片段
    if not cleaned.strip("."):
        return fallback
    return cleaned


@dataclass
class StoredFile:
    relative_path: str
    content_type: str
    size: int


class LocalFileStorage:

    def __init__(self, root: Path, max_size: int):
        self.root = Path(root)
        self.max_size = max_size

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def absolute(self, relative_path: str) -> Path:
        return self.root.joinpath(*relative_path.split("/"))

    def _reserve(self, directory: Path, filename: str):
        timestamp = int(time.time() * 1000)
        while True:
            name = f"{timestamp}-{filename}"
            try:
                handle = open(directory / name, "xb")
            except FileExistsError:
                timestamp += 1
                continue
            return name, handle

    async def save_upload(self, user_id: str, upload: UploadFile) -> StoredFile:
        """Stream an upload to disk. Empty or oversized files are removed and rejected."""
        user_dir = sanitize_filename(user_id, fallback="_")
        directory = self.root / user_dir
        directory.mkdir(parents=True, exist_ok=True)

        name, handle = self._reserve(directory, sanitize_filename(upload.filename or ""))
        relative_path = f"{user_dir}/{name}"
        size = 0
        try:
            with handle:
                while content := await upload.read(CHUNK_SIZE):
                    size += len(content)
                    if size > self.max_size:
                        raise ValidationFailed.for_field(
                            "file", f"File exceeds the maximum size of {self.max_size} bytes", "too_large"
                        )
                    handle.write(content)
            if size == 0:
                raise ValidationFailed.for_field("fileSize", "Uploaded file is empty", "greater_than")
        except Exception:
            self.delete(relative_path)
            raise

        logger.info("Stored upload %s (%d bytes)", relative_path, size)
        return StoredFile(
            relative_path=relative_path,
            content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
            size=size,
        )

    def delete(self, relative_path: str) -> None:
        try:
            os.remove(self.absolute(relative_path))
        except FileNotFoundError:
            pass


def get_file_storage(request: Request) -> LocalFileStorage:
    return request.app.state.file_storage
