"""Article drafts: operator-only listing, saving and deletion."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import ValidationError
from brestoise.routes.common import content_client, read_json_body, respond, store_failure
from brestoise.services import articles as articles_svc
from brestoise.store import StoreError

router = APIRouter(prefix="/api/drafts", tags=["articles"])
logger = logging.getLogger(__name__)

_ADMIN_ERROR = "Admin token invalide"


@router.get("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def get_drafts(request: Request) -> JSONResponse:
    """List the drafts index, or return one draft with ``?slug=``."""
    slug = request.query_params.get("slug", "")
    client = content_client(request)
    try:
        if not slug:
            drafts = await articles_svc.list_drafts(client)
            return respond(status.HTTP_200_OK, {"success": True, "drafts": drafts})
        article = await articles_svc.get_draft(client, slug)
    except StoreError as exc:
        return store_failure(request, exc, "Lecture des brouillons impossible")
    if article is None:
        return respond(status.HTTP_404_NOT_FOUND, {"success": False, "error": "Brouillon introuvable"})
    return respond(status.HTTP_200_OK, {"success": True, "article": article})


@router.post("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def save_draft(request: Request) -> JSONResponse:
    try:
        article = await articles_svc.save_draft(content_client(request), await read_json_body(request))
    except ValidationError as exc:
        body = {"success": False, "error": exc.message}
        if exc.errors:
            body["errors"] = exc.errors
        return respond(exc.status_code, body)
    except StoreError as exc:
        logger.warning("Draft save failed status=%s", exc.status_code)
        return store_failure(request, exc, "Erreur lors de la sauvegarde du brouillon")
    return respond(status.HTTP_200_OK, {"success": True, "slug": article.slug})


@router.delete("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def delete_draft(request: Request) -> JSONResponse:
    try:
        payload = await read_json_body(request)
    except ValidationError:
        payload = {}
    raw_slug = payload.get("slug") if isinstance(payload, dict) else None
    slug = articles_svc.slugify(raw_slug or request.query_params.get("slug", ""))
    if not slug:
        return respond(status.HTTP_400_BAD_REQUEST, {"success": False, "error": "Slug manquant"})
    try:
        await articles_svc.delete_draft(content_client(request), slug)
    except StoreError as exc:
        logger.warning("Draft delete failed slug=%s status=%s", slug, exc.status_code)
        return store_failure(request, exc, "Erreur lors de la suppression du brouillon")
    return respond(status.HTTP_200_OK, {"success": True, "slug": slug})


@router.api_route("", methods=["PUT", "PATCH"])
async def drafts_method_not_allowed(request: Request) -> JSONResponse:
    return respond(status.HTTP_405_METHOD_NOT_ALLOWED, {"success": False, "error": "Méthode non autorisée"})
