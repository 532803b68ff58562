"""Data models for the documents kept in the content store."""

from brestoise.models.about import ABOUT_KEY, DEFAULT_ABOUT_CONTENT, AboutContent
from brestoise.models.article import (
    ARTICLES_INDEX_KEY,
    CATEGORY_OPTIONS,
    DRAFTS_INDEX_KEY,
    Article,
    ArticleMeta,
    normalize_category,
)
from brestoise.models.gallery import GALLERY_KEY, MAX_GALLERY_ITEMS, GalleryConfig, GalleryItem
from brestoise.models.lead import INBOX_KEY, Lead, LeadCategory
from brestoise.models.subscriber import SUBSCRIBERS_KEY, SubscriberEntry
from brestoise.models.testimonial import TESTIMONIALS_KEY, Testimonial, TestimonialStatus

__all__ = [
    "ABOUT_KEY",
    "ARTICLES_INDEX_KEY",
    "CATEGORY_OPTIONS",
    "DEFAULT_ABOUT_CONTENT",
    "DRAFTS_INDEX_KEY",
    "GALLERY_KEY",
    "INBOX_KEY",
    "MAX_GALLERY_ITEMS",
    "SUBSCRIBERS_KEY",
    "TESTIMONIALS_KEY",
    "AboutContent",
    "Article",
    "ArticleMeta",
    "GalleryConfig",
    "GalleryItem",
    "Lead",
    "LeadCategory",
    "SubscriberEntry",
    "Testimonial",
    "TestimonialStatus",
    "normalize_category",
]
