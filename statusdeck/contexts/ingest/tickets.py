"""
Ticket reference extraction and item text cleanup.

Ticket ids are carried in item links as a query parameter
(e.g. ...?text=89536). Authors also repeat the id at the end of the item
text in a few decorated forms, which is removed from the description.
"""

import re
from typing import Optional

from statusdeck.contexts.ingest.patterns import TextRegex


def extract_ticket_id(url: Optional[str]) -> Optional[str]:
    """
    Pull a numeric ticket id out of a reference link.

    Args:
        url: Link href (may be None)

    Returns:
        Digit string, or None when there is no link or no id in it

    Example:
        >>> extract_ticket_id("https://dev.example.com/_search?type=workitem&text=89536")
        '89536'
    """
    if not url:
        return None
    match = re.search(TextRegex.TICKET_QUERY_ID, url)
    return match.group(1) if match else None


def strip_ticket_reference(text: str, ticket_id: Optional[str]) -> str:
    """
    Remove a trailing ticket id from item text.

    Handles "- 12345", "(12345)", "- (12345)" and bare "12345", only at the
    end of the string.

    Args:
        text: Item text
        ticket_id: Id to remove (no-op when None)

    Returns:
        Text without the trailing reference, stripped
    """
    if not ticket_id:
        return text.strip()

    escaped = re.escape(ticket_id)
    text = re.sub(TextRegex.TRAILING_TICKET_DECORATED.format(ticket_id=escaped), "", text)
    text = re.sub(TextRegex.TRAILING_TICKET_BARE.format(ticket_id=escaped), "", text)
    return text.strip()


def strip_list_prefix(text: str) -> str:
    """Remove a leading "- " list-continuation marker."""
    if text.startswith(TextRegex.LIST_PREFIX):
        return text[len(TextRegex.LIST_PREFIX) :].strip()
    return text


def clean_item_text(text: str, ticket_id: Optional[str]) -> str:
    """
    Normalize list-item text into a description.

    Example:
        >>> clean_item_text("- Fix login redirect - (89536)", "89536")
        'Fix login redirect'
    """
    return strip_list_prefix(strip_ticket_reference(text.strip(), ticket_id))
