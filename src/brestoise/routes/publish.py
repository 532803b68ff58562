"""Article publishing: write or remove a published article, then rebuild the site."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import ValidationError
from brestoise.models.article import ARTICLES_INDEX_KEY, article_key
from brestoise.notifications import DeployResult
from brestoise.routes.common import content_client, read_json_body, respond, store_failure, webhooks
from brestoise.services import articles as articles_svc
from brestoise.store import ContentStoreClient, StoreError

router = APIRouter(prefix="/api/publish", tags=["articles"])
logger = logging.getLogger(__name__)

_ADMIN_ERROR = "Admin token invalide"
_STORE_ERROR = "Erreur GitHub, vérifiez le dépôt / la branche / le token."


async def _deploy(request: Request, client: ContentStoreClient) -> DeployResult:
    if client.mode != "github":
        return DeployResult(triggered=False, error="Mode local, aucun déploiement")
    return await webhooks(request).trigger_deploy()


def _files(slug: str) -> dict[str, str]:
    return {"article": article_key(slug), "index": ARTICLES_INDEX_KEY}


@router.post("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def publish_article(request: Request) -> JSONResponse:
    """Publish or update an article: 201 when new, 200 when it replaced one."""
    try:
        article = articles_svc.validate_article(await read_json_body(request))
    except ValidationError as exc:
        body = {"success": False, "error": exc.message}
        if exc.errors:
            body["errors"] = exc.errors
        return respond(exc.status_code, body)

    client = content_client(request)
    try:
        existed = await articles_svc.publish_article(client, article)
    except StoreError as exc:
        logger.warning("Publish failed slug=%s status=%s", article.slug, exc.status_code)
        return store_failure(request, exc, _STORE_ERROR)

    deploy = await _deploy(request, client)
    site_url = request.app.state.settings.app.site_url.rstrip("/")
    return respond(
        status.HTTP_200_OK if existed else status.HTTP_201_CREATED,
        {
            "success": True,
            "slug": article.slug,
            "url": f"{site_url}/articles/{article.slug}",
            "files": _files(article.slug),
            "deployTriggered": deploy.triggered,
            "deploy": deploy.model_dump(),
        },
    )


@router.delete("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def delete_article(request: Request) -> JSONResponse:
    try:
        payload = await read_json_body(request)
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message})
    raw_slug = payload.get("slug") if isinstance(payload, dict) else None
    slug = articles_svc.slugify(raw_slug or request.query_params.get("slug", ""))
    if not slug:
        return respond(status.HTTP_400_BAD_REQUEST, {"success": False, "error": "Slug manquant"})

    client = content_client(request)
    try:
        from_index, deleted_file = await articles_svc.delete_article(client, slug)
    except StoreError as exc:
        logger.warning("Article delete failed slug=%s status=%s", slug, exc.status_code)
        return store_failure(request, exc, _STORE_ERROR)

    deploy = await _deploy(request, client)
    return respond(
        status.HTTP_200_OK,
        {
            "success": True,
            "slug": slug,
            "deletedFromIndex": from_index,
            "deletedFile": deleted_file,
            "files": _files(slug),
            "deployTriggered": deploy.triggered,
            "deploy": deploy.model_dump(),
        },
    )


@router.api_route("", methods=["GET", "PUT", "PATCH"])
async def publish_method_not_allowed(request: Request) -> JSONResponse:
    return respond(status.HTTP_405_METHOD_NOT_ALLOWED, {"success": False, "error": "Méthode non autorisée"})
