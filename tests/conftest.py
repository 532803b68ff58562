"""Shared fixtures: explicit settings, fake stores and an app wired to them."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from brestoise.app import create_app
from brestoise.config import (
    AppConfig,
    AuthConfig,
    EmailConfig,
    GitHubConfig,
    Settings,
    WebhookConfig,
)
from tests.fakes import FakeStore

PUBLISH_TOKEN = "s3cret"


def make_settings(
    content_root: Path | str,
    *,
    repo: str = "",
    token: str = "",
    publish_token: str = PUBLISH_TOKEN,
    email_key: str = "",
    owner: str = "",
    lead_url: str = "",
    deploy_hook_url: str = "",
    env: str = "test",
) -> Settings:
    """Build settings without touching the process environment."""
    return Settings(
        github=GitHubConfig(repo=repo, token=token, branch="main"),
        auth=AuthConfig(publish_token=publish_token),
        email=EmailConfig(
            api_key=email_key,
            from_address="À la Brestoise <no-reply@example.com>",
            owner_address=owner,
            api_url="https://api.resend.test",
        ),
        webhooks=WebhookConfig(lead_url=lead_url, deploy_hook_url=deploy_hook_url),
        app=AppConfig(env=env, log_level="INFO", content_root=str(content_root), http_timeout=5.0),
    )


class RecordingTransport:
    """Answers every outbound request with a fixed status and keeps the requests."""

    def __init__(self, status_code: int = 200, body: dict | None = None) -> None:
        self.status_code = status_code
        self.body = body if body is not None else {"id": "msg-1"}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {PUBLISH_TOKEN}"}


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def outbound() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client(tmp_path, outbound):
    """Return a factory for TestClients; pass ``store`` to replace the configured store."""
    clients: list[TestClient] = []
    patches = []

    def _make(settings: Settings | None = None, *, store=None, transport=None) -> TestClient:
        settings = settings or make_settings(tmp_path)
        logging_patch = patch("brestoise.app.configure_logging")
        logging_patch.start()
        patches.append(logging_patch)
        if store is not None:
            store_patch = patch("brestoise.routes.common.create_store", return_value=store)
            store_patch.start()
            patches.append(store_patch)
        app = create_app(settings, transport=httpx.MockTransport(transport or outbound))
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    for active in reversed(patches):
        active.stop()
