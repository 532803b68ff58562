"""Home gallery: validation, loading with a default, and saving."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from brestoise.errors import ValidationError
from brestoise.models.gallery import (
    DEFAULT_GALLERY_TITLE,
    GALLERY_KEY,
    MAX_GALLERY_ITEMS,
    GalleryConfig,
    GalleryItem,
)
from brestoise.store import dump_json

if TYPE_CHECKING:
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)


def new_item_id() -> str:
    return f"img-{uuid4().hex}"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_gallery(payload: Any) -> GalleryConfig:
    """Validate an operator payload and assign ids to items that lack one."""
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")

    items = payload.get("items")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise ValidationError("Liste d'images invalide")
    if len(items) > MAX_GALLERY_ITEMS:
        raise ValidationError(f"Maximum {MAX_GALLERY_ITEMS} images")

    validated: list[GalleryItem] = []
    for index, item in enumerate(items, start=1):
        src = _text(item.get("src")) if isinstance(item, dict) else ""
        if not src:
            raise ValidationError(f"Image {index} : source manquante")
        validated.append(
            GalleryItem(
                id=_text(item.get("id")) or new_item_id(),
                src=src,
                alt=_text(item.get("alt")),
                description=_text(item.get("description")),
            )
        )

    hero_images = payload.get("homeHeroImages")
    return GalleryConfig(
        title=_text(payload.get("title")) or DEFAULT_GALLERY_TITLE,
        items=validated,
        home_hero_images=[img for img in hero_images if isinstance(img, str)]
        if isinstance(hero_images, list)
        else [],
    )


async def load_gallery(client: ContentStoreClient) -> tuple[GalleryConfig, str]:
    """Return the stored gallery and where it came from (store mode or ``empty``).

    Store transport errors propagate so callers can report an upstream failure.
    """
    document = await client.read(GALLERY_KEY)
    if document is None:
        return GalleryConfig(), "empty"
    try:
        return GalleryConfig.model_validate(json.loads(document.text)), client.mode
    except (json.JSONDecodeError, PydanticValidationError):
        logger.warning("Stored gallery is unreadable, serving the default", exc_info=True)
        return GalleryConfig(), "empty"


async def save_gallery(client: ContentStoreClient, gallery: GalleryConfig) -> str | None:
    """Replace the gallery document, naming the revision read just before."""
    _, revision = await client.update(
        GALLERY_KEY,
        lambda _current: dump_json(gallery.to_json()),
        "chore(gallery): update gallery images",
    )
    logger.info("Gallery saved items=%d mode=%s", len(gallery.items), client.mode)
    return revision
