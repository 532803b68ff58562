"""Testimonials: visitor submissions, operator moderation and publishing."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from brestoise.errors import InvalidTransitionError, NotFoundError, ValidationError
from brestoise.models.testimonial import TESTIMONIALS_KEY, Testimonial, TestimonialStatus
from brestoise.services.collections import read_collection, rewrite_collection

if TYPE_CHECKING:
    from brestoise.notifications import EmailSender
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)

MAX_EMBEDDED_IMAGE_LENGTH = 500_000
MAX_PHOTO_COUNT = 5

_ALLOWED_TRANSITIONS = {
    TestimonialStatus.PENDING: {TestimonialStatus.PUBLISHED, TestimonialStatus.REJECTED},
}


def clamp_rating(value: Any, fallback: int = 5) -> int:
    """Round to the nearest whole star and keep it within 1..5."""
    if isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number) or math.isinf(number):
        return fallback
    return min(5, max(1, math.floor(number + 0.5)))


def _optional(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _data_url(value: Any, label: str) -> str | None:
    text = _optional(value)
    if text is None:
        return None
    if not text.startswith("data:image/"):
        raise ValidationError(f"{label} invalide")
    if len(text) > MAX_EMBEDDED_IMAGE_LENGTH:
        raise ValidationError(f"{label} trop volumineux")
    return text


def _photos(value: Any) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValidationError("Photos invalides")
    if len(value) > MAX_PHOTO_COUNT:
        raise ValidationError(f"Maximum {MAX_PHOTO_COUNT} photos autorisées")
    photos = []
    for entry in value:
        if not isinstance(entry, str) or not entry.startswith("data:image/"):
            raise ValidationError("Photos invalides")
        if len(entry) > MAX_EMBEDDED_IMAGE_LENGTH:
            raise ValidationError("Une photo est trop volumineuse")
        photos.append(entry)
    return photos or None


def normalize_testimonial(payload: Any, *, status: TestimonialStatus) -> Testimonial:
    """Validate a testimonial payload.

    The text may arrive as ``body``, ``message`` or ``text`` depending on the
    form that sent it.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")
    name = _optional(payload.get("name"))
    if not name:
        raise ValidationError("Nom requis")
    body = (
        _optional(payload.get("message"))
        or _optional(payload.get("body"))
        or _optional(payload.get("text"))
    )
    if not body:
        raise ValidationError("Témoignage requis")

    company = _optional(payload.get("company"))
    avatar_url = _optional(payload.get("avatarUrl"))
    avatar = _data_url(payload.get("avatar") or payload.get("avatarDataUrl"), "Avatar")
    return Testimonial(
        name=name,
        body=body,
        rating=clamp_rating(payload.get("rating")),
        status=status,
        role=_optional(payload.get("role")),
        company=company,
        client_type=_optional(payload.get("clientType")) or company,
        city=_optional(payload.get("city")),
        email=_optional(payload.get("email")),
        avatar=avatar or avatar_url,
        avatar_url=avatar_url,
        photos=_photos(payload.get("photos")),
        source_lead_id=_optional(payload.get("sourceLeadId")),
    )


async def list_testimonials(
    client: ContentStoreClient,
    *,
    include_unpublished: bool = False,
) -> list[Testimonial]:
    testimonials = await read_collection(client, TESTIMONIALS_KEY, Testimonial)
    if include_unpublished:
        return testimonials
    return [t for t in testimonials if t.status is TestimonialStatus.PUBLISHED]


async def add_testimonial(client: ContentStoreClient, testimonial: Testimonial) -> Testimonial:
    await rewrite_collection(
        client,
        TESTIMONIALS_KEY,
        Testimonial,
        lambda current: [testimonial, *current],
        f"feat(testimonials): add testimonial {testimonial.id}",
    )
    logger.info("Testimonial recorded id=%s status=%s", testimonial.id, testimonial.status)
    return testimonial


async def set_status(
    client: ContentStoreClient,
    testimonial_id: str,
    status: TestimonialStatus,
) -> Testimonial:
    """Move a pending testimonial to published or rejected."""
    updated: list[Testimonial] = []

    def _transition(current: list[Testimonial]) -> list[Testimonial]:
        target = next((t for t in current if t.id == testimonial_id), None)
        if target is None:
            raise NotFoundError(testimonial_id)
        if status not in _ALLOWED_TRANSITIONS.get(target.status, set()):
            raise InvalidTransitionError(f"{target.status} -> {status}")
        changed = target.model_copy(update={"status": status})
        updated.append(changed)
        return [changed if t.id == testimonial_id else t for t in current]

    await rewrite_collection(
        client,
        TESTIMONIALS_KEY,
        Testimonial,
        _transition,
        f"chore(testimonials): mark {testimonial_id} {status}",
    )
    logger.info("Testimonial moderated id=%s status=%s", testimonial_id, status)
    return updated[0]


async def delete_testimonial(client: ContentStoreClient, testimonial_id: str) -> None:
    def _without(current: list[Testimonial]) -> list[Testimonial]:
        remaining = [t for t in current if t.id != testimonial_id]
        if len(remaining) == len(current):
            raise NotFoundError(testimonial_id)
        return remaining

    await rewrite_collection(
        client,
        TESTIMONIALS_KEY,
        Testimonial,
        _without,
        f"chore(testimonials): delete testimonial {testimonial_id}",
    )
    logger.info("Testimonial deleted id=%s", testimonial_id)


async def submit_testimonial(
    client: ContentStoreClient,
    payload: Any,
    *,
    email_sender: EmailSender,
) -> Testimonial:
    """Record a visitor testimonial as pending and tell the owner, best effort."""
    try:
        testimonial = normalize_testimonial(payload, status=TestimonialStatus.PENDING)
    except ValidationError as exc:
        raise ValidationError(exc.message, status_code=400) from None
    await add_testimonial(client, testimonial)

    if email_sender.is_configured:
        try:
            await email_sender.send_template(
                email_sender.owner_address,
                f"Témoignage : {testimonial.name}",
                "testimonial_owner.html",
                testimonial=testimonial,
            )
        except Exception:  # noqa: BLE001
            logger.warning("Testimonial notification failed id=%s", testimonial.id, exc_info=True)
    return testimonial
