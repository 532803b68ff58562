"""Inbox routes: visitors file leads, operators list and delete them."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import require_publish_token
from brestoise.errors import NotFoundError, ValidationError
from brestoise.routes.common import content_client, read_json_body, respond, store_failure
from brestoise.services import leads as leads_svc
from brestoise.store import StoreError

router = APIRouter(prefix="/api/inbox", tags=["inbox"])
logger = logging.getLogger(__name__)

_ADMIN_ERROR = "Admin token invalide"


@router.get("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def list_leads(request: Request) -> JSONResponse:
    try:
        leads = await leads_svc.list_leads(content_client(request))
    except StoreError as exc:
        return store_failure(request, exc, "Lecture de l'inbox impossible.")
    return respond(status.HTTP_200_OK, {"success": True, "leads": [lead.to_json() for lead in leads]})


@router.post("")
async def create_lead(request: Request) -> JSONResponse:
    try:
        lead = leads_svc.normalize_lead(await read_json_body(request))
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message})
    try:
        await leads_svc.add_lead(content_client(request), lead)
    except StoreError as exc:
        return store_failure(request, exc, "Impossible d'enregistrer la demande.")
    return respond(status.HTTP_201_CREATED, {"success": True, "lead": lead.to_json()})


@router.delete("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def delete_lead(request: Request) -> JSONResponse:
    lead_id = request.query_params.get("id", "").strip()
    if not lead_id:
        return respond(status.HTTP_400_BAD_REQUEST, {"success": False, "error": "Identifiant manquant"})
    try:
        await leads_svc.delete_lead(content_client(request), lead_id)
    except NotFoundError:
        return respond(status.HTTP_404_NOT_FOUND, {"success": False, "error": "Demande introuvable"})
    except StoreError as exc:
        return store_failure(request, exc, "Impossible de mettre à jour l'inbox.")
    return respond(status.HTTP_200_OK, {"success": True})
