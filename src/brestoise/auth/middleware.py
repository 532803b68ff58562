"""Shared bearer-token gate for administrative endpoints."""

from __future__ import annotations

import logging
import secrets
from functools import wraps
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> str:
    """Return the token from ``Authorization: Bearer <token>``, or an empty string."""
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        return ""
    return header[len("Bearer ") :].strip()


def is_authorized(request: Request, *, fail_closed: bool = False) -> bool:
    """Compare the bearer token with ``PUBLISH_TOKEN`` in constant time.

    With no token configured every caller passes unless ``fail_closed``.
    """
    expected = request.app.state.settings.auth.publish_token
    if not expected:
        if fail_closed:
            return False
        logger.warning("PUBLISH_TOKEN is not set, admin endpoint %s is open", request.url.path)
        return True
    provided = extract_bearer_token(request)
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_publish_token(
    envelope: str = "success",
    *,
    error: str = "Unauthorized",
    fail_closed: bool = False,
) -> Callable[
    [Callable[..., Coroutine[object, object, object]]],
    Callable[..., Coroutine[object, object, object]],
]:
    """Answer 401 with ``{envelope: false, error}`` unless the bearer token matches."""

    def decorator(
        func: Callable[..., Coroutine[object, object, object]],
    ) -> Callable[..., Coroutine[object, object, object]]:
        @wraps(func)
        async def wrapper(request: Request, *args: object, **kwargs: object) -> object:
            if not is_authorized(request, fail_closed=fail_closed):
                logger.info("Rejected admin request path=%s", request.url.path)
                return JSONResponse(
                    {envelope: False, "error": error},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                )
            return await func(request, *args, **kwargs)

        return wrapper

    return decorator
