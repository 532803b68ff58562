"""Home gallery routes: public read, admin replace."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import ValidationError
from brestoise.routes.common import (
    NO_STORE_HEADERS,
    content_client,
    error_details,
    read_json_body,
    respond,
    webhooks,
)
from brestoise.services.gallery import load_gallery, normalize_gallery, save_gallery
from brestoise.store import ConflictError, StoreError

router = APIRouter(prefix="/api", tags=["gallery"])
logger = logging.getLogger(__name__)


@router.get("/home-gallery")
async def get_gallery(request: Request) -> JSONResponse:
    """Return the gallery, the empty default when none is stored, 502 if the store fails."""
    client = content_client(request)
    try:
        gallery, source = await load_gallery(client)
    except StoreError as exc:
        logger.warning("Gallery read failed mode=%s status=%s", client.mode, exc.status_code)
        return respond(
            status.HTTP_502_BAD_GATEWAY,
            {"success": False, "error": "Lecture de la galerie impossible", **error_details(request, exc)},
            headers=NO_STORE_HEADERS,
        )
    return respond(
        status.HTTP_200_OK,
        {"success": True, "data": gallery.to_json(), "source": source},
        headers=NO_STORE_HEADERS,
    )


@router.put("/home-gallery")
@require_publish_token("success")
async def put_gallery(request: Request) -> JSONResponse:
    """Validate and replace the gallery, then ask for a site rebuild."""
    try:
        gallery = normalize_gallery(await read_json_body(request))
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message}, headers=NO_STORE_HEADERS)

    client = content_client(request)
    try:
        await save_gallery(client, gallery)
    except ConflictError as exc:
        logger.warning("Gallery write conflict status=%s", exc.status_code)
        return respond(
            status.HTTP_502_BAD_GATEWAY,
            {"success": False, "error": "Conflit d'écriture GitHub, réessayez.", **error_details(request, exc)},
            headers=NO_STORE_HEADERS,
        )
    except StoreError as exc:
        logger.warning("Gallery write failed status=%s", exc.status_code)
        return respond(
            status.HTTP_502_BAD_GATEWAY,
            {"success": False, "error": "GitHub write failed", **error_details(request, exc)},
            headers=NO_STORE_HEADERS,
        )
    except OSError as exc:
        logger.exception("Local gallery write failed")
        return respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"success": False, "error": "Write failed", **error_details(request, exc)},
            headers=NO_STORE_HEADERS,
        )

    body = {"success": True, "data": gallery.to_json()}
    if client.mode == "github":
        body["mode"] = "github"
        body["deploy"] = (await webhooks(request).trigger_deploy()).model_dump()
    else:
        body["mode"] = "fs-write"
    return respond(status.HTTP_200_OK, body, headers=NO_STORE_HEADERS)
