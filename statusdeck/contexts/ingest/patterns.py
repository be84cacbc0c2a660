"""
Markup and text pattern constants for report parsing.

Selectors and regexes used to walk report decks, organized into frozen
dataclasses by category.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DeckSelectors:
    """
    Structural markers of a report deck.

    One `.slide` per team, optionally preceded by a cover slide that also
    carries `title-slide`.
    """

    SLIDE: str = ".slide"
    COVER_SLIDE_CLASS: str = "title-slide"
    TEAM_NAME_TAG: str = "h2"
    TEAM_LEAD: str = ".team-lead"


@dataclass(frozen=True)
class SectionSelectors:
    """
    Markers inside a team slide.

    Section boxes hold a title plus an optional sequence of
    (sub-heading, list) pairs or plain paragraphs.
    """

    SECTION_BOX: str = ".section-box"
    SECTION_TITLE: str = ".section-title"
    SECTION_TITLE_CLASS: str = "section-title"
    SUBHEADING_TAGS: tuple = ("h3",)
    LIST_TAGS: tuple = ("ul", "ol")
    ITEM_TAG: str = "li"
    LINK_TAG: str = "a"
    PARAGRAPH_TAG: str = "p"

    # Placeholder paragraphs are rendered in italics
    ITALIC_STYLE: str = "italic"


@dataclass(frozen=True)
class TextRegex:
    """Regexes applied to extracted text."""

    # Period-end date in the document title: MM.DD.YYYY
    PERIOD_END_DATE: str = r"(\d{2})\.(\d{2})\.(\d{4})"

    # Work-item id carried as a query parameter in ticket links (...?text=89536)
    TICKET_QUERY_ID: str = r"text=(\d+)"

    # Trailing ticket reference in either "- 12345", "(12345)" or "- (12345)" form.
    # Formatted with the escaped ticket id.
    TRAILING_TICKET_DECORATED: str = r"\s*-?\s*\(?{ticket_id}\)?\s*$"
    TRAILING_TICKET_BARE: str = r"\s*{ticket_id}\s*$"

    # List-continuation marker left at the start of some items
    LIST_PREFIX: str = "- "
