"""Visitor lead routes: newsletter signup, contact form, testimonial submission."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from brestoise.errors import ValidationError
from brestoise.notifications import EmailError
from brestoise.routes.common import (
    client_ip,
    content_client,
    email_sender,
    error_details,
    read_json_body,
    respond,
    webhooks,
)
from brestoise.services.contact import ContactOutcome, parse_contact, submit_contact
from brestoise.services.subscriptions import parse_subscription, subscribe
from brestoise.services.testimonials import submit_testimonial
from brestoise.services.trail import DEBUG_TRAIL_HEADER, DebugTrail
from brestoise.store import StoreError

router = APIRouter(prefix="/api", tags=["leads"])
logger = logging.getLogger(__name__)


@router.post("/subscribe")
async def subscribe_route(request: Request) -> JSONResponse:
    """Accept a signup; any syntactically valid email gets ``200 {ok: true}``."""
    try:
        entry = parse_subscription(
            await read_json_body(request),
            ip=client_ip(request),
            origin=request.headers.get("origin", ""),
            user_agent=request.headers.get("user-agent", ""),
        )
    except ValidationError as exc:
        return respond(exc.status_code, {"ok": False, "error": exc.message})

    trail = await subscribe(
        entry,
        client=content_client(request),
        email_sender=email_sender(request),
        webhooks=webhooks(request),
    )
    return respond(
        status.HTTP_200_OK,
        {"ok": True},
        headers={DEBUG_TRAIL_HEADER: trail.header_value()},
    )


@router.post("/contact")
async def contact_route(request: Request) -> JSONResponse:
    try:
        contact = parse_contact(await read_json_body(request))
    except ValidationError as exc:
        return respond(exc.status_code, {"ok": False, "error": exc.message})

    trail = DebugTrail()
    try:
        outcome = await submit_contact(
            contact,
            client=content_client(request),
            email_sender=email_sender(request),
            webhooks=webhooks(request),
            trail=trail,
        )
    except EmailError as exc:
        logger.warning("Contact notification failed status=%s", exc.status_code)
        trail.error("owner_email")
        return respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"ok": False, "error": "Envoi du message impossible", **error_details(request, exc)},
            headers={DEBUG_TRAIL_HEADER: trail.header_value()},
        )

    headers = {DEBUG_TRAIL_HEADER: trail.header_value()}
    if outcome is ContactOutcome.FALLBACK:
        return respond(
            status.HTTP_202_ACCEPTED,
            {"ok": False, "fallback": "mailto"},
            headers=headers,
        )
    return respond(status.HTTP_200_OK, {"ok": True}, headers=headers)


@router.post("/testimonial")
async def testimonial_route(request: Request) -> JSONResponse:
    """Record a visitor testimonial for moderation."""
    try:
        testimonial = await submit_testimonial(
            content_client(request),
            await read_json_body(request),
            email_sender=email_sender(request),
        )
    except ValidationError as exc:
        return respond(exc.status_code, {"ok": False, "error": exc.message})
    except StoreError as exc:
        logger.warning("Testimonial write failed status=%s", exc.status_code)
        return respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"ok": False, "error": "server_error", **error_details(request, exc)},
        )
    return respond(status.HTTP_200_OK, {"ok": True, "id": testimonial.id})
