"""Tests for the publish-token gate."""

import json
from unittest.mock import MagicMock

from brestoise.auth.middleware import extract_bearer_token, is_authorized, require_publish_token


def _request(token: str = "s3cret", header: str | None = None) -> MagicMock:
    request = MagicMock()
    request.app.state.settings.auth.publish_token = token
    request.headers = {"authorization": header} if header is not None else {}
    request.url.path = "/api/home-gallery"
    return request


@require_publish_token("ok", error="Accès refusé")
async def protected_view(request):
    return {"ok": True}


def test_extract_bearer_token():
    assert extract_bearer_token(_request(header="Bearer  abc ")) == "abc"
    assert extract_bearer_token(_request(header="Basic abc")) == ""
    assert extract_bearer_token(_request()) == ""


def test_is_authorized_matching_token():
    assert is_authorized(_request(header="Bearer s3cret")) is True


def test_is_authorized_wrong_token():
    assert is_authorized(_request(header="Bearer nope")) is False


def test_is_authorized_open_without_configured_token():
    assert is_authorized(_request(token="")) is True


def test_is_authorized_fail_closed_without_configured_token():
    assert is_authorized(_request(token="", header="Bearer anything"), fail_closed=True) is False


async def test_decorator_returns_401_with_envelope():
    response = await protected_view(_request(header="Bearer nope"))
    assert response.status_code == 401
    assert json.loads(response.body) == {"ok": False, "error": "Accès refusé"}


async def test_decorator_passes_when_token_matches():
    assert await protected_view(_request(header="Bearer s3cret")) == {"ok": True}
