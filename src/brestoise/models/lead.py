"""Inbox lead model: visitor requests kept for later review."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from brestoise.models.base import RecordBase

INBOX_KEY = "content/inbox/leads.json"


class LeadCategory(StrEnum):
    NEWSLETTER = "newsletter"
    SERVICES = "services"
    QUOTE = "quote"
    TESTIMONIAL = "testimonial"
    CONTACT = "contact"
    SUGGESTION = "suggestion"


class Lead(RecordBase):
    """A visitor-submitted record captured in the inbox collection."""

    category: LeadCategory
    source: str
    email: str | None = None
    name: str | None = None
    message: str | None = None
    meta: dict[str, Any] | None = None
