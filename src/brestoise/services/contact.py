"""Contact form: notify the owner, keep a lead, acknowledge the visitor."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from brestoise.errors import ValidationError
from brestoise.models.base import ContentModel
from brestoise.models.lead import Lead, LeadCategory
from brestoise.services.leads import add_lead, is_valid_email

if TYPE_CHECKING:
    from brestoise.notifications import EmailSender, Webhooks
    from brestoise.services.trail import DebugTrail
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("fullName", "email", "projectType", "message", "consent")


class ContactOutcome(StrEnum):
    SENT = "sent"
    FALLBACK = "fallback"


class ContactRequest(ContentModel):
    full_name: str
    email: str
    project_type: str
    message: str
    consent: bool = True
    company: str | None = None
    phone: str | None = None
    budget: str | None = None
    source: str = "contact-form"
    path: str | None = None


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_contact(payload: Any) -> ContactRequest:
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide", status_code=400)
    missing = [
        name
        for name in REQUIRED_FIELDS
        if (not payload.get(name) if name == "consent" else not _text(payload.get(name)))
    ]
    if missing:
        raise ValidationError(f"Champs requis manquants : {', '.join(missing)}", status_code=400)
    if not is_valid_email(payload["email"]):
        raise ValidationError("Email invalide", status_code=400)
    return ContactRequest(
        full_name=_text(payload["fullName"]),
        email=_text(payload["email"]),
        project_type=_text(payload["projectType"]),
        message=_text(payload["message"]),
        company=_text(payload.get("company")) or None,
        phone=_text(payload.get("phone")) or None,
        budget=_text(payload.get("budget")) or None,
        source=_text(payload.get("source"))[:120] or "contact-form",
        path=_text(payload.get("path")) or None,
    )


async def submit_contact(
    contact: ContactRequest,
    *,
    client: ContentStoreClient,
    email_sender: EmailSender,
    webhooks: Webhooks,
    trail: DebugTrail,
) -> ContactOutcome:
    """Handle a validated contact request.

    Recording the lead and the webhook are best effort. The owner
    notification is the one step that must succeed: its EmailError
    propagates. Without an email provider the visitor is sent to mailto.
    """
    lead = Lead(
        category=LeadCategory.CONTACT,
        source=contact.source,
        email=contact.email,
        name=contact.full_name,
        message=contact.message,
        meta={"projectType": contact.project_type, "company": contact.company, "path": contact.path},
    )
    try:
        await add_lead(client, lead)
        trail.ok("inbox")
    except Exception:  # noqa: BLE001
        trail.error("inbox")

    if webhooks.lead_configured:
        try:
            await webhooks.forward_lead("contact", contact.to_json())
            trail.ok("webhook")
        except Exception:  # noqa: BLE001
            trail.error("webhook")
    else:
        trail.skipped("webhook")

    if not email_sender.is_configured:
        logger.warning("Email provider not configured, contact falls back to mailto")
        trail.skipped("owner_email")
        return ContactOutcome.FALLBACK

    await email_sender.send_template(
        email_sender.owner_address,
        f"Contact : {contact.full_name} ({contact.project_type})",
        "contact_owner.html",
        contact=contact,
    )
    trail.ok("owner_email")

    try:
        await email_sender.send_template(
            contact.email,
            "Votre message à À la Brestoise",
            "contact_ack.html",
            contact=contact,
        )
        trail.ok("ack_email")
    except Exception:  # noqa: BLE001
        trail.error("ack_email")

    logger.info("Contact handled project_type=%s trail=%s", contact.project_type, trail.header_value())
    return ContactOutcome.SENT
