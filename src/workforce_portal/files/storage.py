from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Blob store on the local disk, sharded by the first two hash characters."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def relative_path(self, file_hash: str) -> str:
        return f"{file_hash[:2]}/{file_hash}"

    def absolute_path(self, storage_path: str) -> Path:
        path = (self._root / storage_path).resolve()
        if self._root.resolve() not in path.parents:
            raise ValueError(f"Storage path escapes the upload folder: {storage_path}")
        return path

    def save(self, file_hash: str, content: bytes) -> str:
        storage_path = self.relative_path(file_hash)
        target = self.absolute_path(storage_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if not target.exists():
            # Write then rename so readers never see a partial blob.
            tmp = target.with_suffix(".part")
            tmp.write_bytes(content)
            os.replace(tmp, target)
            logger.debug("Stored blob %s (%d bytes)", storage_path, len(content))
        return storage_path

    def read(self, storage_path: str) -> bytes:
        return self.absolute_path(storage_path).read_bytes()

    def delete(self, storage_path: str) -> None:
        target = self.absolute_path(storage_path)
        if target.exists():
            target.unlink()
            logger.debug("Deleted blob %s", storage_path)
