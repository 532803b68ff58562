"""Tests for the GitHub Contents API adapter."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from brestoise.config import GitHubConfig
from brestoise.store import ConfigurationError, ConflictError, GitHubStore, TransportError
from brestoise.store.github import COMMITTER, encode_path
from tests.fakes import FakeGitHub


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
async def store(github):
    async with httpx.AsyncClient(transport=httpx.MockTransport(github)) as http:
        yield GitHubStore(GitHubConfig(repo="owner/site", token="tok", branch="main"), http)


def test_encode_path_keeps_slashes():
    assert encode_path("public/uploads/mon article/é.png") == "public/uploads/mon%20article/%C3%A9.png"


async def test_get_returns_none_for_missing_file(store):
    assert await store.get("content/home/gallery.json") is None


async def test_get_decodes_content_and_revision(store, github):
    sha = github.seed("content/home/gallery.json", '{"title": "G"}')

    document = await store.get("content/home/gallery.json")

    assert document.text == '{"title": "G"}'
    assert document.revision == sha
    request = github.requests[-1]
    assert request.url.params["ref"] == "main"
    assert request.headers["Authorization"] == "token tok"
    assert request.headers["Accept"] == "application/vnd.github+json"


async def test_get_raises_transport_error_on_server_failure(store, github):
    github.force_status = 500

    with pytest.raises(TransportError) as exc_info:
        await store.get("content/home/gallery.json")

    assert exc_info.value.status_code == 500


async def test_put_creates_file_without_sha(store, github):
    revision = await store.put("data/subscribers.csv", "a,b\n", "chore: add")

    body = json.loads(github.requests[-1].content)
    assert "sha" not in body
    assert body["branch"] == "main"
    assert body["committer"] == COMMITTER
    assert base64.b64decode(body["content"]) == b"a,b\n"
    assert revision == github.files["data/subscribers.csv"][1]


async def test_put_without_revision_resolves_current_sha(store, github):
    sha = github.seed("content/about/a-propos.json", "{}")

    await store.put("content/about/a-propos.json", '{"a": 1}', "chore: update")

    get_request, put_request = github.requests[-2:]
    assert get_request.method == "GET"
    assert json.loads(put_request.content)["sha"] == sha


async def test_put_with_stale_revision_raises_conflict(store, github):
    github.seed("content/home/gallery.json", "{}")

    with pytest.raises(ConflictError) as exc_info:
        await store.put("content/home/gallery.json", "{}", "chore: update", "stale-sha")

    assert exc_info.value.status_code == 409
    assert github.files["content/home/gallery.json"][0] == b"{}"


async def test_put_expecting_absent_file_conflicts_when_it_exists(store, github):
    github.seed("content/home/gallery.json", "{}")

    with pytest.raises(ConflictError):
        await store.put("content/home/gallery.json", "[]", "chore: create", None)


async def test_put_upstream_error_is_not_a_conflict(store, github):
    github.force_status = 401

    with pytest.raises(TransportError) as exc_info:
        await store.put("content/home/gallery.json", "{}", "chore: update", None)

    assert not isinstance(exc_info.value, ConflictError)
    assert exc_info.value.status_code == 401


async def test_missing_credentials_raise_configuration_error():
    async with httpx.AsyncClient() as http:
        store = GitHubStore(GitHubConfig(repo="", token="", branch="main"), http)
        with pytest.raises(ConfigurationError) as exc_info:
            await store.put("content/home/gallery.json", "{}", "chore: update")

    assert exc_info.value.missing == ["GITHUB_REPO", "GITHUB_TOKEN"]


class TestUnreachableGitHub:
    """Network failures surface as TransportError, never as raw httpx errors."""

    async def test_get_connect_error_becomes_transport_error(self, store, github):
        github.raise_error = httpx.ConnectError("connection refused")

        with pytest.raises(TransportError) as exc_info:
            await store.get("content/home/gallery.json")

        assert "GitHub unreachable" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_put_timeout_becomes_transport_error(self, store, github):
        github.raise_error = httpx.ReadTimeout("timed out")

        with pytest.raises(TransportError):
            await store.put("content/home/gallery.json", "{}", "chore: update", None)

    async def test_delete_connect_error_becomes_transport_error(self, store, github):
        github.raise_error = httpx.ConnectError("connection refused")

        with pytest.raises(TransportError):
            await store.delete("content/drafts/a.json", "chore: delete", "sha-1")


class TestLargeFiles:
    """Files GitHub does not inline are fetched through the raw media type."""

    async def test_get_refetches_raw_content(self, store, github):
        ledger = "email,createdAt\n" + "".join(f"user{i}@x.fr,2024-01-01\n" for i in range(3))
        sha = github.seed("data/subscribers.csv", ledger)
        github.large.add("data/subscribers.csv")

        document = await store.get("data/subscribers.csv")

        assert document.text == ledger
        assert document.revision == sha
        assert github.requests[-1].headers["Accept"] == "application/vnd.github.raw"

    async def test_raw_fetch_failure_raises_instead_of_returning_empty(self, store, github):
        github.seed("data/subscribers.csv", "email\nuser0@x.fr\n")
        github.large.add("data/subscribers.csv")
        github.raw_status = 500

        with pytest.raises(TransportError) as exc_info:
            await store.get("data/subscribers.csv")

        assert exc_info.value.status_code == 500

    async def test_directory_listing_is_rejected(self):
        def listing(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"type": "file", "name": "a.json"}])

        async with httpx.AsyncClient(transport=httpx.MockTransport(listing)) as http:
            listing_store = GitHubStore(GitHubConfig(repo="owner/site", token="tok", branch="main"), http)
            with pytest.raises(TransportError):
                await listing_store.get("content/drafts")


class TestDelete:
    async def test_delete_sends_current_sha(self, store, github):
        sha = github.seed("content/drafts/a.json", "{}")

        assert await store.delete("content/drafts/a.json", "chore: delete") is True

        request = github.requests[-1]
        body = json.loads(request.content)
        assert request.method == "DELETE"
        assert body["sha"] == sha
        assert body["branch"] == "main"
        assert "content/drafts/a.json" not in github.files

    async def test_delete_missing_file_returns_false(self, store, github):
        assert await store.delete("content/drafts/a.json", "chore: delete") is False
        assert all(r.method == "GET" for r in github.requests)

    async def test_delete_with_stale_revision_conflicts(self, store, github):
        github.seed("content/drafts/a.json", "{}")

        with pytest.raises(ConflictError):
            await store.delete("content/drafts/a.json", "chore: delete", "stale")
