"""À la Brestoise content API: gallery, leads, testimonials and site content."""

__version__ = "0.1.0"
