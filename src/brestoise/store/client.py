"""Read-modify-write orchestration over whichever document store is configured."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from brestoise.store.base import Document, DocumentStore

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


def dump_json(value: Any) -> str:
    """Serialize a document the way it is committed: 2-space indent, UTF-8 kept."""
    return json.dumps(value, indent=2, ensure_ascii=False)


class ContentStoreClient:
    """Used by every service that persists content.

    An update reads the current revision, applies a transformation and writes
    back naming that revision, so a remote store that enforces the
    precondition rejects a concurrent writer instead of losing its data.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @property
    def mode(self) -> str:
        return self._store.mode

    @property
    def store(self) -> DocumentStore:
        return self._store

    async def read(self, key: str) -> Document | None:
        return await self._store.get(key)

    async def write(
        self,
        key: str,
        content: str | bytes,
        message: str,
        revision: str | None,
    ) -> str | None:
        """Write ``content`` with ``revision`` as the optimistic-concurrency precondition."""
        return await self._store.put(key, content, message, revision)

    async def replace(self, key: str, content: str | bytes, message: str) -> str | None:
        """Overwrite ``key`` whatever its current revision; the store resolves it."""
        return await self._store.put(key, content, message)

    async def update(
        self,
        key: str,
        transform: Callable[[str | None], str],
        message: str,
    ) -> tuple[str, str | None]:
        """Read ``key``, compute the next value and write it back.

        Returns the written text and the new revision.
        """
        current = await self.read(key)
        next_value = transform(current.text if current else None)
        revision = await self.write(
            key,
            next_value,
            message,
            current.revision if current else None,
        )
        logger.debug("Updated document key=%s mode=%s revision=%s", key, self.mode, revision)
        return next_value, revision

    async def delete(self, key: str, message: str) -> bool:
        """Remove ``key`` at its current revision; False when it did not exist."""
        deleted = await self._store.delete(key, message)
        logger.debug("Deleted document key=%s mode=%s deleted=%s", key, self.mode, deleted)
        return deleted

    async def read_json(self, key: str, default: Any = None) -> Any:
        """Decode the JSON document at ``key``; ``default`` when it does not exist."""
        document = await self.read(key)
        if document is None:
            return default
        return json.loads(document.text)

    async def update_json(
        self,
        key: str,
        transform: Callable[[Any], Any],
        message: str,
        *,
        default: Any = None,
    ) -> tuple[Any, str | None]:
        """JSON flavour of :meth:`update`; ``transform`` receives the decoded value."""
        result: dict[str, Any] = {}

        def _apply(current: str | None) -> str:
            value = json.loads(current) if current else default
            result["value"] = transform(value)
            return dump_json(result["value"])

        _, revision = await self.update(key, _apply, message)
        return result["value"], revision
