"""About page routes."""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import ValidationError
from brestoise.routes.common import content_client, read_json_body, respond, store_failure, webhooks
from brestoise.services.about import load_about, normalize_about, save_about
from brestoise.store import StoreError

router = APIRouter(prefix="/api", tags=["about"])


@router.get("/about")
async def get_about(request: Request) -> JSONResponse:
    try:
        content = await load_about(content_client(request))
    except StoreError as exc:
        return store_failure(request, exc, "Lecture de la page À propos impossible.")
    return respond(status.HTTP_200_OK, {"success": True, "content": content.to_json()})


@router.put("/about")
@require_publish_token("success", error="Admin token invalide")
async def put_about(request: Request) -> JSONResponse:
    try:
        content = normalize_about(await read_json_body(request))
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message})
    client = content_client(request)
    try:
        await save_about(client, content)
    except StoreError as exc:
        return store_failure(request, exc, "Erreur GitHub lors de l'écriture.")

    deploy = await webhooks(request).trigger_deploy() if client.mode == "github" else None
    body = {"success": True, "content": content.to_json()}
    if deploy is not None:
        body["deploy"] = deploy.model_dump()
    return respond(status.HTTP_200_OK, body)
