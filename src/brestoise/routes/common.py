"""Helpers shared by the API routes: request state, JSON bodies, responses."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from brestoise.errors import ValidationError
from brestoise.notifications import EmailSender, Webhooks
from brestoise.store import ContentStoreClient, StoreError, create_store

NO_STORE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate"}


def content_client(request: Request) -> ContentStoreClient:
    """Build the content store client for this request from the app settings."""
    state = request.app.state
    return ContentStoreClient(create_store(state.settings, state.http))


def email_sender(request: Request) -> EmailSender:
    return request.app.state.email


def webhooks(request: Request) -> Webhooks:
    return request.app.state.webhooks


def error_details(request: Request, exc: BaseException) -> dict[str, Any]:
    """``{"details": ...}`` outside production, nothing in production."""
    if not request.app.state.settings.app.include_error_details:
        return {}
    return {"details": str(exc)}


async def read_json_body(request: Request) -> Any:
    """Decode the request body; an empty body is an empty object."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("JSON invalide", status_code=400) from None


def respond(
    status_code: int,
    body: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=headers)


def store_failure(request: Request, exc: StoreError, error: str) -> JSONResponse:
    """Map a content store error to a 502 ``success`` envelope."""
    return respond(502, {"success": False, "error": error, **error_details(request, exc)})


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""
