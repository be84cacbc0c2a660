"""
Item collection from section boxes.

A team slide holds several section boxes, each with a title and a sequence
of (sub-heading, list) pairs or plain paragraphs. Collection walks a box's
child nodes in document order as a fold carrying (current sub-heading,
items so far).

Two variants:
- grouped (accomplishments, goals): items without a preceding sub-heading
  get the default section label
- simple (blockers, risks): items without a sub-heading keep section None,
  an italic placeholder paragraph ("No blockers ...") means the box is
  deliberately empty, and bare paragraphs are items when there is no list
"""

from functools import partial, reduce
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from bs4 import Tag

from statusdeck.contexts.ingest.patterns import SectionSelectors
from statusdeck.contexts.ingest.report_data_structure import ParsedItem
from statusdeck.contexts.ingest.section_config import CollectorVariant, SectionConfig, SectionSpec
from statusdeck.contexts.ingest.tickets import clean_item_text, extract_ticket_id
from statusdeck.utils.text_processing import contains_any

# Layout wrappers that are walked through as if their children were the box's own
WRAPPER_TAGS = ("div", "section", "article")

EMPHASIS_TAGS = ("em", "i")


class _WalkState(NamedTuple):
    current_section: Optional[str]
    items: Tuple[ParsedItem, ...]


def title_matches(container_title: str, fragment: str) -> bool:
    """
    Check whether a section box title belongs to a section.

    Plain substring test on an already-truncated fragment, so
    "Blockers / Work Arounds" still matches fragment "Blockers".
    """
    return fragment in container_title


def section_title(box: Tag) -> str:
    """Text of the box's first section-title element, or ""."""
    title = box.select_one(SectionSelectors.SECTION_TITLE)
    return title.get_text().strip() if title else ""


def find_section_box(slide: Tag, fragment: str) -> Optional[Tag]:
    """Return the first section box on the slide whose title contains fragment."""
    for box in slide.select(SectionSelectors.SECTION_BOX):
        if title_matches(section_title(box), fragment):
            return box
    return None


def item_from_list_entry(entry: Tag, section: Optional[str]) -> Optional[ParsedItem]:
    """
    Build an item from one <li>.

    Returns None for empty or whitespace-only entries.
    """
    text = entry.get_text().strip()
    if not text:
        return None

    link = entry.find(SectionSelectors.LINK_TAG)
    ticket_url = (link.get("href") or None) if link else None
    ticket_id = extract_ticket_id(ticket_url)

    return ParsedItem(
        section=section,
        description=clean_item_text(text, ticket_id),
        ticket_id=ticket_id,
        ticket_url=ticket_url,
    )


def _is_section_title(node: Tag) -> bool:
    return SectionSelectors.SECTION_TITLE_CLASS in (node.get("class") or [])


def _iter_content_nodes(box: Tag) -> Iterator[Tag]:
    """Yield the box's content elements in order, flattening layout wrappers."""
    for node in box.children:
        if not isinstance(node, Tag) or _is_section_title(node):
            continue
        if node.name in WRAPPER_TAGS:
            yield from _iter_content_nodes(node)
        else:
            yield node


def _fold_step(state: _WalkState, node: Tag, fallback_section: Optional[str]) -> _WalkState:
    if node.name in SectionSelectors.SUBHEADING_TAGS:
        return state._replace(current_section=node.get_text().strip() or None)

    if node.name in SectionSelectors.LIST_TAGS:
        section = state.current_section or fallback_section
        entries = node.find_all(SectionSelectors.ITEM_TAG, recursive=False)
        new_items = [item_from_list_entry(entry, section) for entry in entries]
        return state._replace(items=state.items + tuple(i for i in new_items if i is not None))

    return state


def walk_section_box(box: Tag, fallback_section: Optional[str] = None) -> List[ParsedItem]:
    """
    Collect list items from a box, labelling each with its nearest sub-heading.

    Args:
        box: Section box element
        fallback_section: Label for items seen before any sub-heading

    Returns:
        Items in document order
    """
    initial = _WalkState(current_section=None, items=())
    step = partial(_fold_step, fallback_section=fallback_section)
    return list(reduce(step, _iter_content_nodes(box), initial).items)


def _is_italic(paragraph: Tag) -> bool:
    style = paragraph.get("style") or ""
    if SectionSelectors.ITALIC_STYLE in style.lower():
        return True
    emphasis = paragraph.find(EMPHASIS_TAGS)
    return emphasis is not None and emphasis.get_text().strip() == paragraph.get_text().strip()


def has_placeholder(box: Tag, markers: Sequence[str]) -> bool:
    """True when the box carries an italic "nothing to report" paragraph."""
    for paragraph in box.find_all(SectionSelectors.PARAGRAPH_TAG):
        if _is_italic(paragraph) and contains_any(paragraph.get_text(), markers):
            return True
    return False


def collect_grouped_items(box: Tag, default_section: str) -> List[ParsedItem]:
    """Collect a grouped box: every item gets a section label."""
    return walk_section_box(box, fallback_section=default_section)


def collect_simple_items(box: Tag, placeholder_markers: Sequence[str]) -> List[ParsedItem]:
    """
    Collect a simple box.

    Placeholder boxes yield nothing. Boxes without list items fall back to
    their paragraphs, one item per non-empty, non-placeholder paragraph.
    """
    if has_placeholder(box, placeholder_markers):
        return []

    items = walk_section_box(box, fallback_section=None)
    if items:
        return items

    paragraph_items = []
    for node in _iter_content_nodes(box):
        if node.name != SectionSelectors.PARAGRAPH_TAG:
            continue
        text = node.get_text().strip()
        if not text or contains_any(text, placeholder_markers):
            continue
        paragraph_items.append(ParsedItem(section=None, description=text))
    return paragraph_items


def collect_section(slide: Tag, spec: SectionSpec, config: SectionConfig) -> List[ParsedItem]:
    """
    Collect one section from a team slide.

    The first section box whose title matches wins. A slide without a
    matching box yields an empty list.
    """
    box = find_section_box(slide, spec.match_fragment)
    if box is None:
        return []

    if spec.variant is CollectorVariant.GROUPED:
        return collect_grouped_items(box, config.default_section)
    return collect_simple_items(box, config.placeholder_markers)
