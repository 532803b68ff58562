"""About page content."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from brestoise.errors import ValidationError
from brestoise.models.about import ABOUT_KEY, DEFAULT_ABOUT_CONTENT, AboutContent
from brestoise.store import dump_json

if TYPE_CHECKING:
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _lines(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [line for line in (_text(entry) for entry in value) if line]


def normalize_about(payload: Any) -> AboutContent:
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")
    about_title = _text(payload.get("aboutTitle"))
    about_body = _lines(payload.get("aboutBody"))
    values_title = _text(payload.get("valuesTitle"))
    approach_title = _text(payload.get("approachTitle"))
    approach_body = _text(payload.get("approachBody"))

    if not about_title or not about_body:
        raise ValidationError("Texte principal manquant.")
    if not values_title:
        raise ValidationError("Titre des valeurs manquant.")
    if not approach_title or not approach_body:
        raise ValidationError("Section approche manquante.")

    return AboutContent(
        about_title=about_title,
        about_body=about_body,
        values_title=values_title,
        values_items=_lines(payload.get("valuesItems")),
        approach_title=approach_title,
        approach_body=approach_body,
    )


async def load_about(client: ContentStoreClient) -> AboutContent:
    """Stored about content, or the default when absent or unreadable."""
    document = await client.read(ABOUT_KEY)
    if document is None:
        return DEFAULT_ABOUT_CONTENT
    try:
        return normalize_about(json.loads(document.text))
    except (json.JSONDecodeError, ValidationError, PydanticValidationError):
        logger.warning("Stored about content is unreadable, serving the default", exc_info=True)
        return DEFAULT_ABOUT_CONTENT


async def save_about(client: ContentStoreClient, content: AboutContent) -> str | None:
    _, revision = await client.update(
        ABOUT_KEY,
        lambda _current: dump_json(content.to_json()),
        "chore(about): update about content",
    )
    return revision
