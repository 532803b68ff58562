"""Content store: GitHub-backed documents with a local filesystem fallback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from brestoise.store.base import (
    UNSET,
    ConfigurationError,
    ConflictError,
    Document,
    DocumentStore,
    StoreError,
    TransportError,
)
from brestoise.store.client import ContentStoreClient, dump_json
from brestoise.store.github import GitHubStore
from brestoise.store.local import LocalStore

if TYPE_CHECKING:
    import httpx

    from brestoise.config import Settings

logger = logging.getLogger(__name__)


def create_store(settings: Settings, http: httpx.AsyncClient) -> DocumentStore:
    """Pick the GitHub store when repository credentials are set, else local files.

    The choice depends only on configuration. A failing remote store is never
    swapped for the local one.
    """
    if settings.github.is_configured:
        return GitHubStore(settings.github, http)
    logger.debug("GitHub store not configured, using local files at %s", settings.app.content_root)
    return LocalStore(settings.app.content_root)


__all__ = [
    "UNSET",
    "ConfigurationError",
    "ConflictError",
    "ContentStoreClient",
    "Document",
    "DocumentStore",
    "GitHubStore",
    "LocalStore",
    "StoreError",
    "TransportError",
    "create_store",
    "dump_json",
]
