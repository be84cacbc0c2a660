"""
Shared utilities for statusdeck.

Common functionality used across contexts:
- Logger setup with provenance
- Text processing (slugs, whitespace)
- Timestamps
- LLM providers
- Text table formatting
"""

from statusdeck.utils.text_processing import slugify, unique_slug
from statusdeck.utils.timestamp import now, today

__all__ = ["slugify", "unique_slug", "now", "today"]
