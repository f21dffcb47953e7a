"""
Filesystem image store.

Writes uploaded bytes under ``settings.image_storage_path`` with a
unique name and returns the resulting path as the image reference.
Decoding / resizing belongs to the media service and is not done here.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from src.domain.errors import ImageProcessingError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})


class FilesystemImageStore:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    async def store(self, data: bytes, ext: str) -> str:
        ext = ext.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ImageProcessingError(f"Unsupported file type: {ext or '<none>'}")
        if not data:
            raise ImageProcessingError("Empty image upload")

        path = self.root / f"sighting_{uuid.uuid4().hex}{ext}"
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            raise ImageProcessingError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Stored %d bytes at %s", len(data), path)
        return str(path)

    def _write(self, path: Path, data: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
