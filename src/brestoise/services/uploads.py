"""Image uploads committed under ``public/uploads/<slug>/``."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TYPE_CHECKING, Any

from brestoise.errors import ValidationError

if TYPE_CHECKING:
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
UPLOADS_PREFIX = "public/uploads"


def _decode(content: str) -> bytes:
    # Browsers send either raw base64 or a full data URL.
    if content.startswith("data:") and "," in content:
        content = content.split(",", 1)[1]
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Contenu invalide (base64 attendu).") from None


async def upload_image(client: ContentStoreClient, payload: Any) -> str:
    """Validate and store an uploaded image; return its public URL path."""
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")
    slug = str(payload.get("slug") or "").strip()
    file_name = str(payload.get("fileName") or "").strip()
    content = str(payload.get("content") or "").strip()

    if not slug or not SLUG_PATTERN.match(slug):
        raise ValidationError("Slug invalide.")
    if not file_name or "/" in file_name or "\\" in file_name or file_name in {".", ".."}:
        raise ValidationError("Nom de fichier invalide.")
    if not content:
        raise ValidationError("Contenu manquant (base64).")

    data = _decode(content)
    key = f"{UPLOADS_PREFIX}/{slug}/{file_name}"
    await client.replace(key, data, f"feat(assets): upload image for {slug}")
    logger.info("Image uploaded path=%s bytes=%d mode=%s", key, len(data), client.mode)
    return f"/uploads/{slug}/{file_name}"
