"""Authentication: a single shared publish token."""

from brestoise.auth.middleware import extract_bearer_token, is_authorized, require_publish_token

__all__ = ["extract_bearer_token", "is_authorized", "require_publish_token"]
