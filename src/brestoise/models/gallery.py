"""Home page gallery document."""

from __future__ import annotations

from pydantic import Field

from brestoise.models.base import ContentModel

GALLERY_KEY = "content/home/gallery.json"
MAX_GALLERY_ITEMS = 15
DEFAULT_GALLERY_TITLE = "Galerie"


class GalleryItem(ContentModel):
    id: str
    src: str
    alt: str = ""
    description: str = ""


class GalleryConfig(ContentModel):
    title: str = DEFAULT_GALLERY_TITLE
    items: list[GalleryItem] = Field(default_factory=list)
    home_hero_images: list[str] = Field(default_factory=list)
