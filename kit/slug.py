"""Feature slug validation and normalization."""

from __future__ import annotations

import re

from .errors import InvalidSlug

SLUG_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
MAX_SLUG_WORDS = 5

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def validate_slug(slug: str) -> None:
    """Raise ``InvalidSlug`` unless ``slug`` is lowercase kebab-case of at most five words."""
    if not slug:
        raise InvalidSlug(slug, "slug cannot be empty")
    if not SLUG_PATTERN.match(slug):
        raise InvalidSlug(slug, "slug must be lowercase kebab-case (e.g., 'my-feature-name')")
    words = slug.split("-")
    if len(words) > MAX_SLUG_WORDS:
        raise InvalidSlug(slug, f"slug cannot exceed {MAX_SLUG_WORDS} words (got {len(words)})")


def is_valid_slug(slug: str) -> bool:
    try:
        validate_slug(slug)
    except InvalidSlug:
        return False
    return True


def normalize_slug(text: str) -> str:
    """Convert free text into slug form.

    Never fails. The result may still be invalid (for example empty, or
    starting with a digit) and must be passed through ``validate_slug``.
    """
    slug = text.lower().replace(" ", "-").replace("_", "-")
    slug = _INVALID_CHARS.sub("", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")
