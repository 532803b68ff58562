"""FastAPI application factory and process entry point."""

from __future__ import annotations

import contextlib
import logging
import time
from typing import TYPE_CHECKING

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brestoise.config import Settings, load_settings
from brestoise.logging import configure_logging
from brestoise.notifications import EmailSender, Webhooks
from brestoise.routes import ROUTERS

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the API. ``transport`` replaces the network for outbound HTTP calls."""
    settings = settings or load_settings()
    configure_logging(settings.app.log_level, settings.app.log_file or None)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        http = httpx.AsyncClient(timeout=settings.app.http_timeout, transport=transport)
        app.state.http = http
        app.state.email = EmailSender(settings.email, http)
        app.state.webhooks = Webhooks(settings.webhooks, http)
        app.state.start_time = time.monotonic()
        if not settings.github.is_configured:
            logger.warning(
                "GitHub store not configured (missing %s), content is kept on local disk at %s",
                ", ".join(settings.github.missing),
                settings.app.content_root,
            )
        if not settings.auth.publish_token:
            logger.warning("PUBLISH_TOKEN is not set, admin endpoints accept any caller")
        logger.info("API started env=%s", settings.app.env)
        try:
            yield
        finally:
            await http.aclose()
            logger.info("API stopped")

    app = FastAPI(title="À la Brestoise API", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Debug-Trail"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error path=%s", request.url.path)
        body = {"success": False, "error": "Server error"}
        if settings.app.include_error_details:
            body["details"] = str(exc)
        return JSONResponse(body, status_code=500)

    for router in ROUTERS:
        app.include_router(router)
    return app


def main() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)  # noqa: S104


if __name__ == "__main__":
    main()
