"""Inbox leads: create, list and delete visitor requests."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from brestoise.errors import NotFoundError, ValidationError
from brestoise.models.lead import INBOX_KEY, Lead, LeadCategory
from brestoise.services.collections import read_collection, rewrite_collection

if TYPE_CHECKING:
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MAX_SOURCE_LENGTH = 120

_MESSAGE_REQUIRED = {
    LeadCategory.SERVICES,
    LeadCategory.QUOTE,
    LeadCategory.TESTIMONIAL,
    LeadCategory.CONTACT,
    LeadCategory.SUGGESTION,
}


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def _optional(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_lead(payload: Any) -> Lead:
    """Build a new lead from a visitor payload or raise ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")

    raw_category = payload.get("category")
    try:
        category = LeadCategory(raw_category.strip().lower() if isinstance(raw_category, str) else "")
    except ValueError:
        raise ValidationError("Catégorie invalide") from None

    source = (_optional(payload.get("source")) or "")[:MAX_SOURCE_LENGTH]
    if not source:
        raise ValidationError("Source manquante")

    email = _optional(payload.get("email"))
    message = _optional(payload.get("message"))
    if category is not LeadCategory.TESTIMONIAL and not is_valid_email(email):
        raise ValidationError("Email requis")
    if category in _MESSAGE_REQUIRED and not message:
        raise ValidationError("Message requis")

    meta = payload.get("meta")
    return Lead(
        category=category,
        source=source,
        email=email,
        name=_optional(payload.get("name")),
        message=message,
        meta=meta if isinstance(meta, dict) else None,
    )


async def list_leads(client: ContentStoreClient) -> list[Lead]:
    return await read_collection(client, INBOX_KEY, Lead)


async def add_lead(client: ContentStoreClient, lead: Lead) -> Lead:
    """Prepend ``lead`` to the inbox collection."""
    await rewrite_collection(
        client,
        INBOX_KEY,
        Lead,
        lambda leads: [lead, *leads],
        f"feat(inbox): add lead {lead.id}",
    )
    logger.info("Lead recorded id=%s category=%s", lead.id, lead.category)
    return lead


async def delete_lead(client: ContentStoreClient, lead_id: str) -> None:
    """Remove one lead by id; NotFoundError when it is not in the inbox."""
    found: list[Lead] = []

    def _without(leads: list[Lead]) -> list[Lead]:
        remaining = [lead for lead in leads if lead.id != lead_id]
        if len(remaining) == len(leads):
            raise NotFoundError(lead_id)
        found.append(next(lead for lead in leads if lead.id == lead_id))
        return remaining

    await rewrite_collection(client, INBOX_KEY, Lead, _without, f"chore(inbox): delete lead {lead_id}")
    logger.info("Lead deleted id=%s category=%s", lead_id, found[0].category)
