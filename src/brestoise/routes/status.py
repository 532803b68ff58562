"""Liveness route reporting which content store the configuration selects."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from brestoise.routes.common import content_client, respond

router = APIRouter(tags=["status"])


@router.get("/healthz")
async def healthz(request: Request) -> JSONResponse:
    settings = request.app.state.settings
    return respond(
        200,
        {
            "ok": True,
            "environment": settings.app.env,
            "store": content_client(request).mode,
            "email": request.app.state.email.is_configured,
            "uptime_seconds": round(time.monotonic() - request.app.state.start_time, 1),
        },
    )
