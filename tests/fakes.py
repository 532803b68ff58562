"""In-memory doubles for the content store and the GitHub Contents API."""

from __future__ import annotations

import base64
import hashlib
import json

import httpx

from brestoise.store import UNSET, ConflictError, Document, TransportError
from brestoise.store.base import _Unset
from brestoise.store.github import RAW_MEDIA_TYPE


def _sha(content: bytes) -> str:
    return hashlib.sha1(content).hexdigest()  # noqa: S324


class FakeStore:
    """Revision-tracking store that enforces the write precondition like GitHub does."""

    mode = "github"

    def __init__(self, documents: dict[str, str | bytes] | None = None) -> None:
        self.documents: dict[str, Document] = {}
        self.puts: list[tuple[str, bytes, str]] = []
        self.deletes: list[tuple[str, str]] = []
        self.fail_get: Exception | None = None
        self.fail_put: Exception | None = None
        for key, content in (documents or {}).items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            self.documents[key] = Document(key=key, content=data, revision=_sha(data))

    async def get(self, key: str) -> Document | None:
        if self.fail_get:
            raise self.fail_get
        return self.documents.get(key)

    async def put(
        self,
        key: str,
        content: str | bytes,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> str | None:
        if self.fail_put:
            raise self.fail_put
        current = self.documents.get(key)
        current_revision = current.revision if current else None
        if not isinstance(revision, _Unset) and revision != current_revision:
            raise ConflictError("revision mismatch", status_code=409)
        data = content.encode("utf-8") if isinstance(content, str) else content
        new_revision = _sha(data + message.encode("utf-8"))
        self.documents[key] = Document(key=key, content=data, revision=new_revision)
        self.puts.append((key, data, message))
        return new_revision

    async def delete(
        self,
        key: str,
        message: str,
        revision: str | None | _Unset = UNSET,
    ) -> bool:
        if self.fail_put:
            raise self.fail_put
        if key not in self.documents:
            return False
        del self.documents[key]
        self.deletes.append((key, message))
        return True

    def text(self, key: str) -> str:
        return self.documents[key].text

    def json(self, key: str):
        return json.loads(self.text(key))


class FakeGitHub:
    """Minimal Contents API for httpx.MockTransport, with sha preconditions.

    Paths in ``large`` behave like files over 1 MB: the JSON answer carries no
    inline content and only the raw media type returns the bytes.
    """

    def __init__(self, repo: str = "owner/site") -> None:
        self.repo = repo
        self.files: dict[str, tuple[bytes, str]] = {}
        self.requests: list[httpx.Request] = []
        self.force_status: int | None = None
        self.raise_error: httpx.HTTPError | None = None
        self.large: set[str] = set()
        self.raw_status: int | None = None

    def seed(self, path: str, content: str | bytes) -> str:
        data = content.encode("utf-8") if isinstance(content, str) else content
        sha = _sha(data)
        self.files[path] = (data, sha)
        return sha

    def _path(self, request: httpx.Request) -> str:
        prefix = f"/repos/{self.repo}/contents/"
        return request.url.path[len(prefix) :]

    def _get(self, request: httpx.Request, path: str) -> httpx.Response:
        if path not in self.files:
            return httpx.Response(404, json={"message": "Not Found"})
        data, sha = self.files[path]
        if request.headers.get("Accept") == RAW_MEDIA_TYPE:
            if self.raw_status:
                return httpx.Response(self.raw_status, text="raw boom")
            return httpx.Response(200, content=data)
        if path in self.large:
            return httpx.Response(
                200,
                json={"type": "file", "path": path, "sha": sha, "size": len(data), "encoding": "none", "content": ""},
            )
        return httpx.Response(
            200,
            json={
                "type": "file",
                "path": path,
                "sha": sha,
                "encoding": "base64",
                "content": base64.b64encode(data).decode(),
            },
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error:
            raise self.raise_error
        if self.force_status:
            return httpx.Response(self.force_status, text="boom")
        path = self._path(request)
        if request.method == "GET":
            return self._get(request, path)
        body = json.loads(request.content)
        existing = self.files.get(path)
        supplied = body.get("sha")
        if request.method == "PUT":
            if existing and supplied is None:
                return httpx.Response(422, json={"message": "Invalid request. \"sha\" wasn't supplied."})
            if existing and supplied != existing[1]:
                return httpx.Response(409, json={"message": f"{path} does not match {supplied}"})
            if not existing and supplied is not None:
                return httpx.Response(409, json={"message": "sha for a missing file"})
            sha = self.seed(path, base64.b64decode(body["content"]))
            return httpx.Response(201 if not existing else 200, json={"content": {"path": path, "sha": sha}})
        if request.method == "DELETE":
            if not existing:
                return httpx.Response(404, json={"message": "Not Found"})
            if supplied != existing[1]:
                return httpx.Response(409, json={"message": f"{path} does not match {supplied}"})
            del self.files[path]
            return httpx.Response(200, json={"content": None, "commit": {"sha": "c0ffee"}})
        return httpx.Response(405)


class FailingTransportError(TransportError):
    """Convenience upstream failure for route tests."""

    def __init__(self) -> None:
        super().__init__("GitHub GET 500: boom", status_code=500)
