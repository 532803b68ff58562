"""Testimonial model and its moderation lifecycle."""

from __future__ import annotations

from enum import StrEnum

from brestoise.models.base import RecordBase

TESTIMONIALS_KEY = "content/testimonials/testimonials.json"


class TestimonialStatus(StrEnum):
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Testimonial(RecordBase):
    """A client recommendation; visitor submissions start as pending."""

    name: str
    body: str
    rating: int = 5
    status: TestimonialStatus = TestimonialStatus.PUBLISHED
    role: str | None = None
    company: str | None = None
    client_type: str | None = None
    city: str | None = None
    email: str | None = None
    avatar: str | None = None
    avatar_url: str | None = None
    photos: list[str] | None = None
    source_lead_id: str | None = None
