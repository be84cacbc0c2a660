"""
Text processing utilities shared across contexts.
"""

import re
from typing import Iterable, Optional, Set

SLUG_SEPARATOR = "-"
EMPTY_SLUG_FALLBACK = "team"


def slugify(name: str, separator: str = SLUG_SEPARATOR) -> str:
    """
    Derive a URL-safe slug from a display name.

    Lower-cases the name, collapses every run of non-alphanumeric characters
    into a single separator, and trims leading/trailing separators.

    Args:
        name: Display name (e.g., "Ops/Infra")
        separator: Replacement for non-alphanumeric runs (default: "-")

    Returns:
        Slug string (e.g., "ops-infra"). Names with no alphanumeric
        characters produce EMPTY_SLUG_FALLBACK.

    Example:
        >>> slugify("Data & Analytics (EU)")
        'data-analytics-eu'
    """
    slug = re.sub(r"[^a-z0-9]+", separator, name.lower()).strip(separator)
    return slug or EMPTY_SLUG_FALLBACK


def unique_slug(base_slug: str, used: Set[str], separator: str = SLUG_SEPARATOR) -> str:
    """
    Return base_slug, or base_slug with the first free numeric suffix.

    Does not modify `used`; callers add the returned slug themselves.

    Example:
        >>> unique_slug("ops-infra", {"ops-infra", "ops-infra-1"})
        'ops-infra-2'
    """
    slug = base_slug
    counter = 1
    while slug in used:
        slug = f"{base_slug}{separator}{counter}"
        counter += 1
    return slug


def contains_any(text: str, markers: Iterable[str]) -> bool:
    """Case-sensitive check that any marker occurs in text."""
    return any(marker in text for marker in markers)


def truncate(text: Optional[str], limit: int = 200) -> str:
    """Truncate text for error messages and log lines."""
    if not text:
        return ""
    return text[:limit] + "..." if len(text) > limit else text
