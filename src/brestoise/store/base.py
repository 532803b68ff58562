"""Document type, store protocol and structured store errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()
"""Sentinel for "no revision supplied": the store resolves the current one itself."""


@dataclass(frozen=True)
class Document:
    """A named blob plus the revision token the store assigned to it."""

    key: str
    content: bytes
    revision: str | None = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


class StoreError(Exception):
    """Base class for content store failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(StoreError):
    """The remote store answered with a non-success status."""


class ConflictError(TransportError):
    """The remote store refused a write whose revision precondition no longer holds."""


class ConfigurationError(StoreError):
    """Store credentials are missing from the environment."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing store configuration: {', '.join(missing)}")
        self.missing = missing


@runtime_checkable
class DocumentStore(Protocol):
    """Read/write contract shared by the remote and local adapters."""

    mode: str

    async def get(self, key: str) -> Document | None:
        """Return the document at ``key`` or None if it does not exist."""
        ...

    async def put(
        self,
        key: str,
        content: str | bytes,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> str | None:
        """Write ``content`` at ``key`` and return the new revision, if the store has one."""
        ...

    async def delete(
        self,
        key: str,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> bool:
        """Remove the document at ``key``; False when it did not exist."""
        ...
