"""Magazine articles, their drafts and the index entries listing them."""

from __future__ import annotations

from pydantic import ConfigDict

from brestoise.models.base import ContentModel

ARTICLES_PREFIX = "content/articles"
DRAFTS_PREFIX = "content/drafts"
ARTICLES_INDEX_KEY = f"{ARTICLES_PREFIX}/index.json"
DRAFTS_INDEX_KEY = f"{DRAFTS_PREFIX}/index.json"
ARTICLE_IMAGES_PREFIX = "images/articles"

MAX_ARTICLE_BODY_LENGTH = 2_000_000
MIN_ARTICLE_BODY_LENGTH = 50

CATEGORY_OPTIONS = ("Beauté & cosmétique", "Commerces & lieux", "Événementiel")
DEFAULT_CATEGORY = CATEGORY_OPTIONS[0]
_LEGACY_CATEGORIES = {
    "Beauté": "Beauté & cosmétique",
    "Commerces & places": "Commerces & lieux",
    "Expérience": "Événementiel",
}

BODY_FONTS = (
    "josefin-sans",
    "raleway",
    "montserrat",
    "merriweather",
    "libre-baskerville",
    "alice",
)


def normalize_category(value: str | None) -> str:
    """Map legacy names onto the current categories; unknown values get the default."""
    value = value.strip() if isinstance(value, str) else ""
    if value in CATEGORY_OPTIONS:
        return value
    return _LEGACY_CATEGORIES.get(value, DEFAULT_CATEGORY)


def article_key(slug: str) -> str:
    return f"{ARTICLES_PREFIX}/{slug}.json"


def draft_key(slug: str) -> str:
    return f"{DRAFTS_PREFIX}/{slug}.json"


class Article(ContentModel):
    """An article as the editor sends it.

    Layout and SEO settings the API does not interpret are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    title: str
    slug: str = ""
    category: str | None = None
    body: str = ""
    tags: list[str] | None = None
    cover: str | None = None
    hero_image: str | None = None
    excerpt: str | None = None
    author: str | None = None
    date: str | None = None
    reading_minutes: int | float | None = None
    sources: list[str] | None = None
    featured: bool | None = None
    body_font: str | None = None
    status: str | None = None


class ArticleMeta(ContentModel):
    """One entry of an articles or drafts index."""

    title: str
    slug: str
    category: str | None = None
    tags: list[str]
    cover: str
    hero_image: str | None = None
    excerpt: str
    date: str
    reading_minutes: int | float | None = None
    featured: bool | None = None
    status: str | None = None
