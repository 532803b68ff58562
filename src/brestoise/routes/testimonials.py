"""Testimonials routes: public listing and operator moderation."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.auth import is_authorized, require_publish_token
from brestoise.errors import InvalidTransitionError, NotFoundError, ValidationError
from brestoise.models.testimonial import TestimonialStatus
from brestoise.routes.common import content_client, read_json_body, respond, store_failure
from brestoise.services import testimonials as testimonials_svc
from brestoise.store import StoreError

router = APIRouter(prefix="/api/testimonials", tags=["testimonials"])
logger = logging.getLogger(__name__)

_ADMIN_ERROR = "Admin token invalide"


@router.get("")
async def list_testimonials(request: Request) -> JSONResponse:
    """Published testimonials; operators may add ``?all=1`` to see every status."""
    wants_all = request.query_params.get("all") in {"1", "true"}
    include_unpublished = wants_all and is_authorized(request)
    try:
        testimonials = await testimonials_svc.list_testimonials(
            content_client(request),
            include_unpublished=include_unpublished,
        )
    except StoreError as exc:
        return store_failure(request, exc, "Lecture des témoignages impossible")
    return respond(
        status.HTTP_200_OK,
        {"success": True, "testimonials": [t.to_json() for t in testimonials]},
    )


@router.post("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def create_testimonial(request: Request) -> JSONResponse:
    try:
        testimonial = testimonials_svc.normalize_testimonial(
            await read_json_body(request),
            status=TestimonialStatus.PUBLISHED,
        )
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message})
    try:
        await testimonials_svc.add_testimonial(content_client(request), testimonial)
    except StoreError as exc:
        return store_failure(request, exc, "Impossible d'enregistrer le témoignage.")
    return respond(status.HTTP_201_CREATED, {"success": True, "testimonial": testimonial.to_json()})


@router.patch("/{testimonial_id}/status")
@require_publish_token("success", error=_ADMIN_ERROR)
async def moderate_testimonial(request: Request, testimonial_id: str) -> JSONResponse:
    """Publish or reject a pending testimonial."""
    try:
        payload = await read_json_body(request)
        raw_status = payload.get("status") if isinstance(payload, dict) else None
        new_status = TestimonialStatus(raw_status)
    except ValidationError as exc:
        return respond(exc.status_code, {"success": False, "error": exc.message})
    except ValueError:
        return respond(status.HTTP_422_UNPROCESSABLE_ENTITY, {"success": False, "error": "Statut invalide"})
    if new_status is TestimonialStatus.PENDING:
        return respond(status.HTTP_422_UNPROCESSABLE_ENTITY, {"success": False, "error": "Statut invalide"})

    try:
        testimonial = await testimonials_svc.set_status(content_client(request), testimonial_id, new_status)
    except NotFoundError:
        return respond(status.HTTP_404_NOT_FOUND, {"success": False, "error": "Témoignage introuvable"})
    except InvalidTransitionError:
        return respond(status.HTTP_409_CONFLICT, {"success": False, "error": "Témoignage déjà modéré"})
    except StoreError as exc:
        return store_failure(request, exc, "Impossible de mettre à jour le témoignage.")
    return respond(status.HTTP_200_OK, {"success": True, "testimonial": testimonial.to_json()})


@router.delete("")
@require_publish_token("success", error=_ADMIN_ERROR)
async def delete_testimonial(request: Request) -> JSONResponse:
    testimonial_id = request.query_params.get("id", "").strip()
    if not testimonial_id:
        return respond(status.HTTP_400_BAD_REQUEST, {"success": False, "error": "Identifiant manquant"})
    try:
        await testimonials_svc.delete_testimonial(content_client(request), testimonial_id)
    except NotFoundError:
        return respond(status.HTTP_404_NOT_FOUND, {"success": False, "error": "Témoignage introuvable"})
    except StoreError as exc:
        return store_failure(request, exc, "Impossible de supprimer le témoignage.")
    return respond(status.HTTP_200_OK, {"success": True})
