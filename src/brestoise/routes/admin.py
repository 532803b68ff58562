"""Operator routes: token check and image upload."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import ValidationError
from brestoise.routes.common import content_client, error_details, read_json_body, respond
from brestoise.services.uploads import upload_image
from brestoise.store import StoreError

router = APIRouter(prefix="/api", tags=["admin"])
logger = logging.getLogger(__name__)


@router.api_route("/admin-auth", methods=["GET", "PUT", "PATCH", "DELETE"])
async def admin_auth_method_not_allowed(request: Request) -> JSONResponse:
    return respond(status.HTTP_405_METHOD_NOT_ALLOWED, {"ok": False, "error": "Method not allowed"})


@router.post("/admin-auth")
@require_publish_token("ok", fail_closed=True)
async def admin_auth(request: Request) -> JSONResponse:
    """Let the admin UI check an operator password; closed when no token is configured."""
    return respond(status.HTTP_200_OK, {"ok": True})


@router.post("/upload-image")
@require_publish_token("ok", error="Accès refusé, mot de passe administrateur invalide.")
async def upload_image_route(request: Request) -> JSONResponse:
    try:
        path = await upload_image(content_client(request), await read_json_body(request))
    except ValidationError as exc:
        return respond(exc.status_code, {"ok": False, "error": exc.message})
    except StoreError as exc:
        logger.warning("Image upload failed status=%s", exc.status_code)
        return respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {
                "ok": False,
                "error": "Échec du téléversement GitHub.",
                "details": {
                    "status": exc.status_code,
                    **({"message": exc.message} if error_details(request, exc) else {}),
                },
            },
        )
    return respond(status.HTTP_200_OK, {"ok": True, "path": path})
