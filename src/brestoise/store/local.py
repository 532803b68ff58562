"""Local filesystem adapter used when no GitHub credentials are configured."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from brestoise.store.base import UNSET, Document, StoreError, _Unset

logger = logging.getLogger(__name__)


class LocalStore:
    """Stores documents as plain files below a root directory.

    There is no revision concept: the last writer wins.
    """

    mode = "fs"

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise StoreError(f"Path escapes the content root: {key}")
        return path

    async def get(self, key: str) -> Document | None:
        """Read a file; any read failure counts as "not found"."""
        path = self._path(key)
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError:
            return None
        return Document(key=key, content=content)

    async def put(
        self,
        key: str,
        content: str | bytes,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> str | None:
        """Overwrite the file at ``key``, creating parent directories."""
        path = self._path(key)
        data = content.encode("utf-8") if isinstance(content, str) else content

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("Local write path=%s bytes=%d message=%r", key, len(data), message)
        return None

    async def delete(
        self,
        key: str,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> bool:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        logger.info("Local delete path=%s message=%r", key, message)
        return True
