"""Article drafts and publishing: validation, editor images and the two indexes."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import math
import re
import unicodedata
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from brestoise.errors import ValidationError
from brestoise.models.article import (
    ARTICLE_IMAGES_PREFIX,
    ARTICLES_INDEX_KEY,
    BODY_FONTS,
    DRAFTS_INDEX_KEY,
    MAX_ARTICLE_BODY_LENGTH,
    MIN_ARTICLE_BODY_LENGTH,
    Article,
    ArticleMeta,
    article_key,
    draft_key,
    normalize_category,
)
from brestoise.models.base import utcnow
from brestoise.store import StoreError, dump_json

if TYPE_CHECKING:
    from brestoise.store import ContentStoreClient

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
INVALID_FIELDS = "Champs invalides."

_MARKDOWN_PUNCTUATION = re.compile(r"[`*_#>!\[\]()~\-]")
_EDITOR_STATE = re.compile(r"^\s*<!-- MAGAZINE_EDITOR_STATE: (.*?) -->", re.DOTALL)
_DATA_URL = re.compile(r"^data:(image/([a-zA-Z+]+));base64,(.+)$")
_IMAGE_EXTENSIONS = {"jpeg": "jpg", "svg+xml": "svg"}


def slugify(value: Any) -> str:
    """Lowercase ASCII words joined by hyphens: ``"Crêpes à Brest"`` gives ``"crepes-a-brest"``."""
    decomposed = unicodedata.normalize("NFD", str(value or "").lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return re.sub(r"[^a-z0-9]+", "-", stripped).strip("-")


def estimate_reading_minutes(text: str) -> int:
    words = _MARKDOWN_PUNCTUATION.sub(" ", text).split()
    return max(1, math.floor(len(words) / WORDS_PER_MINUTE + 0.5))


def reading_minutes(value: Any, text: str) -> int | float:
    """Keep a positive operator-supplied value, otherwise estimate from ``text``."""
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        minutes = 0.0
    if math.isfinite(minutes) and minutes > 0:
        return int(minutes) if minutes.is_integer() else minutes
    return estimate_reading_minutes(text)


def _now_iso() -> str:
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_valid_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def _image_url(value: Any) -> str | None:
    return (value.strip() or None) if isinstance(value, str) else None


def _body_font(value: Any) -> str | None:
    candidate = value.strip().lower() if isinstance(value, str) else ""
    return candidate if candidate in BODY_FONTS else None


def _build(payload: dict[str, Any], overrides: dict[str, Any]) -> Article:
    try:
        return Article.model_validate({**payload, **overrides})
    except PydanticValidationError as exc:
        errors = {str(error["loc"][0]): error["msg"] for error in exc.errors() if error["loc"]}
        raise ValidationError(INVALID_FIELDS, errors=errors) from None


# Indexes


def _parse_index(text: str | None) -> list[dict[str, Any]]:
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Article index is unreadable, starting from an empty list")
        return []
    if not isinstance(parsed, list):
        return []
    return [entry for entry in parsed if isinstance(entry, dict)]


async def read_index(client: ContentStoreClient, key: str) -> list[dict[str, Any]]:
    document = await client.read(key)
    return _parse_index(document.text if document else None)


def _upsert(entries: list[dict[str, Any]], meta: dict[str, Any]) -> list[dict[str, Any]]:
    kept = [entry for entry in entries if entry.get("slug") != meta["slug"]]
    kept.append(meta)
    return sorted(kept, key=lambda entry: str(entry.get("date") or ""), reverse=True)


async def _write_index_entry(
    client: ContentStoreClient,
    key: str,
    meta: ArticleMeta,
    message: str,
) -> None:
    entry = meta.to_json(exclude_none=True)
    await client.update(key, lambda current: dump_json(_upsert(_parse_index(current), entry)), message)


async def _remove_index_entry(client: ContentStoreClient, key: str, slug: str, message: str) -> bool:
    """Drop ``slug`` from the index at ``key``; False when it was not listed."""
    if not any(entry.get("slug") == slug for entry in await read_index(client, key)):
        return False
    await client.update(
        key,
        lambda current: dump_json([e for e in _parse_index(current) if e.get("slug") != slug]),
        message,
    )
    return True


# Editor images


async def _store_editor_image(client: ContentStoreClient, slug: str, data_url: str) -> str | None:
    match = _DATA_URL.match(data_url)
    if not match:
        return None
    extension = _IMAGE_EXTENSIONS.get(match.group(2), match.group(2))
    encoded = match.group(3)
    name = hashlib.sha1(encoded.encode("utf-8")).hexdigest()[:16]  # noqa: S324
    public_path = f"{ARTICLE_IMAGES_PREFIX}/{slug}/img_{name}.{extension}"
    key = f"public/{public_path}"
    try:
        data = base64.b64decode(encoded, validate=True)
        # Names are content hashes, so an existing file already holds these bytes.
        if await client.read(key) is None:
            await client.write(key, data, f"feat(assets): upload image for draft {slug}", None)
    except (ValueError, StoreError):
        logger.warning("Editor image upload failed path=%s", key, exc_info=True)
        return None
    logger.info("Editor image stored path=%s mode=%s", key, client.mode)
    return f"/{public_path}"


async def upload_editor_images(
    client: ContentStoreClient,
    slug: str,
    body: str,
    cover: str | None,
) -> tuple[str, str | None]:
    """Commit the data-URL images of the editor state and point the body at them.

    The editor keeps its block state in a leading ``MAGAZINE_EDITOR_STATE``
    HTML comment. Returns the rewritten body and cover; an image that fails
    to upload keeps its data URL.
    """
    match = _EDITOR_STATE.match(body)
    if not match:
        return body, cover
    try:
        state = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("Editor state is not valid JSON slug=%s", slug)
        return body, cover
    blocks = state.get("blocks") if isinstance(state, dict) else None
    if not isinstance(blocks, list):
        return body, cover

    replacements: dict[str, str] = {}
    for block in blocks:
        if not isinstance(block, dict) or block.get("type") != "image":
            continue
        content = block.get("content")
        url = content.get("imageUrl") if isinstance(content, dict) else None
        if not isinstance(url, str) or not url.startswith("data:image/"):
            continue
        public_url = replacements.get(url) or await _store_editor_image(client, slug, url)
        if public_url is None:
            continue
        content["imageUrl"] = public_url
        replacements[url] = public_url

    if not replacements:
        return body, cover
    encoded_state = json.dumps(state, ensure_ascii=False, separators=(",", ":"))
    body = body.replace(match.group(0), f"<!-- MAGAZINE_EDITOR_STATE: {encoded_state} -->", 1)
    for data_url, public_url in replacements.items():
        body = body.replace(data_url, public_url)
    return body, replacements.get(cover, cover)


# Drafts


async def save_draft(client: ContentStoreClient, payload: Any) -> Article:
    """Store a draft and list it in the drafts index. Only the title is required."""
    if not isinstance(payload, dict):
        raise ValidationError("Payload invalide")
    if not payload.get("title"):
        raise ValidationError("Le titre est obligatoire pour un brouillon.")
    slug = slugify(payload.get("slug") or payload.get("title"))
    if not slug:
        raise ValidationError("Slug manquant")

    body = payload["body"] if isinstance(payload.get("body"), str) else ""
    cover = _image_url(payload.get("cover")) or _image_url(payload.get("heroImage"))
    article = _build(
        payload,
        {
            "slug": slug,
            "status": "draft",
            "body": body,
            "readingMinutes": reading_minutes(
                payload.get("readingMinutes"),
                f"{payload.get('excerpt') or ''}\n\n{body}",
            ),
            "bodyFont": _body_font(payload.get("bodyFont")),
        },
    )
    body, cover = await upload_editor_images(client, slug, body, cover)
    article = article.model_copy(update={"body": body, "cover": cover})

    await client.replace(
        draft_key(slug),
        dump_json(article.to_json(exclude_none=True)),
        f"chore(drafts): save {slug}",
    )
    meta = ArticleMeta(
        title=article.title,
        slug=slug,
        category=article.category,
        tags=article.tags or [],
        cover=article.cover or "",
        excerpt=article.excerpt or "",
        date=article.date or _now_iso(),
        status="draft",
    )
    await _write_index_entry(client, DRAFTS_INDEX_KEY, meta, f"chore(drafts): update index for {slug}")
    logger.info("Draft saved slug=%s mode=%s", slug, client.mode)
    return article


async def list_drafts(client: ContentStoreClient) -> list[dict[str, Any]]:
    return await read_index(client, DRAFTS_INDEX_KEY)


async def get_draft(client: ContentStoreClient, slug: str) -> dict[str, Any] | None:
    slug = slugify(slug)
    if not slug:
        return None
    document = await client.read(draft_key(slug))
    if document is None:
        return None
    try:
        return json.loads(document.text)
    except json.JSONDecodeError:
        logger.warning("Stored draft is unreadable slug=%s", slug)
        return None


async def delete_draft(client: ContentStoreClient, slug: str) -> bool:
    """Remove a draft and its index entry; True when the draft file existed."""
    await _remove_index_entry(client, DRAFTS_INDEX_KEY, slug, f"chore(drafts): delete {slug} from index")
    return await client.delete(draft_key(slug), f"chore(drafts): delete {slug}")


# Published articles


def validate_article(payload: Any) -> Article:
    """Check a publish request and return the article as it will be written.

    Raises :class:`ValidationError` with per-field messages in ``errors``.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            INVALID_FIELDS,
            errors={
                "title": "Le titre est obligatoire.",
                "slug": "Le slug ne peut contenir que des lettres, chiffres et tirets.",
                "body": "Le contenu est trop court.",
            },
        )

    errors: dict[str, str] = {}
    title = payload.get("title")
    if not title or not str(title).strip():
        errors["title"] = "Le titre est obligatoire."
    category = payload["category"].strip() if isinstance(payload.get("category"), str) else ""
    if not category:
        errors["category"] = "La thématique est obligatoire."
    body = payload["body"] if isinstance(payload.get("body"), str) else ""
    if len(body.strip()) < MIN_ARTICLE_BODY_LENGTH:
        errors["body"] = "Le contenu est trop court."
    elif len(body) > MAX_ARTICLE_BODY_LENGTH:
        errors["body"] = f"Le contenu est trop long (max {MAX_ARTICLE_BODY_LENGTH} caractères)."
    if payload.get("date") and not _is_valid_date(payload["date"]):
        errors["date"] = "La date n’est pas valide."
    if errors:
        raise ValidationError(INVALID_FIELDS, errors=errors)

    slug = slugify(payload.get("slug") or title)
    if not slug:
        raise ValidationError(INVALID_FIELDS, errors={"slug": "Slug manquant"})

    sources = payload.get("sources")
    return _build(
        payload,
        {
            "slug": slug,
            "category": normalize_category(category),
            "body": body,
            "cover": _image_url(payload.get("cover")) or _image_url(payload.get("heroImage")),
            "featured": payload.get("featured") is True,
            "readingMinutes": reading_minutes(
                payload.get("readingMinutes"),
                f"{payload.get('excerpt') or ''}\n\n{body}",
            ),
            "sources": sources if isinstance(sources, list) else [],
            "bodyFont": _body_font(payload.get("bodyFont")),
        },
    )


async def publish_article(client: ContentStoreClient, article: Article) -> bool:
    """Write the article and its index entry; True when it replaced a listed article."""
    slug = article.slug
    existed = any(entry.get("slug") == slug for entry in await read_index(client, ARTICLES_INDEX_KEY))
    message = f"chore(cms): update article {slug}" if existed else f"feat(article): publish {slug} from admin"

    await client.replace(article_key(slug), dump_json(article.to_json(exclude_none=True)), message)
    meta = ArticleMeta(
        title=article.title,
        slug=slug,
        category=article.category,
        tags=article.tags or [],
        cover=article.cover or "",
        hero_image=article.cover or "",
        excerpt=article.excerpt or "",
        date=article.date or _now_iso(),
        reading_minutes=article.reading_minutes,
        featured=bool(article.featured),
    )
    await _write_index_entry(client, ARTICLES_INDEX_KEY, meta, message)
    logger.info("Article published slug=%s updated=%s mode=%s", slug, existed, client.mode)
    return existed


async def delete_article(client: ContentStoreClient, slug: str) -> tuple[bool, bool]:
    """Unlist and remove a published article.

    Returns whether it was dropped from the index and whether its file existed.
    """
    from_index = await _remove_index_entry(
        client,
        ARTICLES_INDEX_KEY,
        slug,
        f"feat(article): delete {slug} from index",
    )
    deleted_file = await client.delete(article_key(slug), f"feat(article): delete {slug} from admin")
    logger.info("Article deleted slug=%s from_index=%s file=%s", slug, from_index, deleted_file)
    return from_index, deleted_file
