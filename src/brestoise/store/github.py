"""GitHub Contents API adapter: every write is a commit on the publish branch."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from brestoise.store.base import (
    UNSET,
    ConfigurationError,
    ConflictError,
    Document,
    TransportError,
    _Unset,
)

if TYPE_CHECKING:
    from brestoise.config import GitHubConfig

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
COMMITTER = {"name": "A la Brestoise bot", "email": "bot@alabrestoise.local"}
JSON_MEDIA_TYPE = "application/vnd.github+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw"

_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409
_HTTP_PRECONDITION_FAILED = 412
_HTTP_UNPROCESSABLE = 422


def encode_path(path: str) -> str:
    """URL-encode each segment of a repository path, keeping the slashes."""
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def _is_conflict(response: httpx.Response) -> bool:
    if response.status_code in (_HTTP_CONFLICT, _HTTP_PRECONDITION_FAILED):
        return True
    # GitHub answers 422 "sha wasn't supplied" when overwriting without a precondition.
    return response.status_code == _HTTP_UNPROCESSABLE and "sha" in response.text


class GitHubStore:
    """Reads and writes repository files through the GitHub Contents API."""

    mode = "github"

    def __init__(
        self,
        config: GitHubConfig,
        http: httpx.AsyncClient,
        *,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self._config = config
        self._http = http
        self._api_url = api_url.rstrip("/")

    def _url(self, key: str) -> str:
        return f"{self._api_url}/repos/{self._config.repo}/contents/{encode_path(key)}"

    def _headers(self, accept: str = JSON_MEDIA_TYPE) -> dict[str, str]:
        return {
            "Accept": accept,
            "Authorization": f"token {self._config.token}",
        }

    def _require_config(self) -> None:
        # create_store only builds this adapter with credentials; this guards direct use.
        if not self._config.is_configured:
            raise ConfigurationError(self._config.missing)

    async def _send(self, method: str, key: str, **kwargs: Any) -> httpx.Response:
        """Issue one Contents API call; network failures become TransportError."""
        try:
            return await self._http.request(method, self._url(key), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("GitHub %s unreachable path=%s error=%s", method, key, exc)
            raise TransportError(f"GitHub unreachable: {exc}") from exc

    def _raise_for_status(self, method: str, key: str, response: httpx.Response) -> None:
        if not response.is_error:
            return
        error_cls = ConflictError if method != "GET" and _is_conflict(response) else TransportError
        logger.warning(
            "GitHub %s failed path=%s status=%d conflict=%s",
            method,
            key,
            response.status_code,
            error_cls is ConflictError,
        )
        raise error_cls(
            f"GitHub {method} {response.status_code}: {response.text}",
            status_code=response.status_code,
        )

    async def _get_raw(self, key: str) -> bytes:
        # Files over 1 MB come back without inline content; the raw media type serves them whole.
        response = await self._send(
            "GET",
            key,
            params={"ref": self._config.branch},
            headers=self._headers(RAW_MEDIA_TYPE),
        )
        self._raise_for_status("GET", key, response)
        return response.content

    async def get(self, key: str) -> Document | None:
        """Fetch a file from the publish branch; None when it does not exist."""
        self._require_config()
        response = await self._send(
            "GET",
            key,
            params={"ref": self._config.branch},
            headers=self._headers(),
        )
        if response.status_code == _HTTP_NOT_FOUND:
            return None
        self._raise_for_status("GET", key, response)

        payload = response.json()
        if not isinstance(payload, dict) or payload.get("type", "file") != "file":
            raise TransportError(f"GitHub GET: {key} is not a file")
        if payload.get("encoding") == "base64":
            content = base64.b64decode(payload.get("content") or "")
        else:
            logger.info("GitHub content not inlined path=%s size=%s", key, payload.get("size"))
            content = await self._get_raw(key)
        return Document(key=key, content=content, revision=payload.get("sha"))

    async def _current_revision(self, key: str) -> str | None:
        existing = await self.get(key)
        return existing.revision if existing else None

    async def put(
        self,
        key: str,
        content: str | bytes,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> str | None:
        """Commit ``content`` at ``key``.

        When ``revision`` is omitted the current SHA is looked up first, so
        the write replaces whatever is there. An explicit ``revision`` (None
        meaning "the file must not exist yet") is sent as the precondition and
        a mismatch surfaces as :class:`ConflictError`.
        """
        self._require_config()
        if isinstance(revision, _Unset):
            revision = await self._current_revision(key)

        data = content.encode("utf-8") if isinstance(content, str) else content
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(data).decode("ascii"),
            "branch": self._config.branch,
            "committer": COMMITTER,
        }
        if revision:
            body["sha"] = revision

        response = await self._send("PUT", key, json=body, headers=self._headers())
        self._raise_for_status("PUT", key, response)

        payload = response.json()
        new_revision = (payload.get("content") or {}).get("sha")
        logger.info("GitHub commit path=%s revision=%s", key, new_revision)
        return new_revision

    async def delete(
        self,
        key: str,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> bool:
        """Remove the file at ``key``; False when there was nothing to remove."""
        self._require_config()
        if isinstance(revision, _Unset):
            revision = await self._current_revision(key)
        if not revision:
            return False

        response = await self._send(
            "DELETE",
            key,
            json={
                "message": message,
                "sha": revision,
                "branch": self._config.branch,
                "committer": COMMITTER,
            },
            headers=self._headers(),
        )
        if response.status_code == _HTTP_NOT_FOUND:
            return False
        self._raise_for_status("DELETE", key, response)
        logger.info("GitHub delete path=%s", key)
        return True
