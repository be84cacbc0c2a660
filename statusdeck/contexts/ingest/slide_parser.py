"""
Team slide parsing for the Ingest context.

One slide per team: an <h2> team name, an optional `.team-lead` marker and
the four section boxes defined in sections.yaml.
"""

from typing import Optional

from bs4 import Tag

from statusdeck.contexts.ingest.collector import collect_section
from statusdeck.contexts.ingest.logger import _log_debug
from statusdeck.contexts.ingest.patterns import DeckSelectors
from statusdeck.contexts.ingest.report_data_structure import ParsedTeam
from statusdeck.contexts.ingest.section_config import SectionConfig, get_section_config


def is_cover_slide(slide: Tag) -> bool:
    return DeckSelectors.COVER_SLIDE_CLASS in (slide.get("class") or [])


def _first_text(slide: Tag, selector: str) -> str:
    node = slide.select_one(selector)
    return node.get_text().strip() if node else ""


def parse_slide(slide: Tag, config: Optional[SectionConfig] = None) -> Optional[ParsedTeam]:
    """
    Parse one team slide.

    Args:
        slide: Slide element
        config: Section definitions (defaults to the packaged sections.yaml)

    Returns:
        ParsedTeam, or None for cover slides and slides without a team name
    """
    if is_cover_slide(slide):
        return None

    name = _first_text(slide, DeckSelectors.TEAM_NAME_TAG)
    if not name:
        _log_debug("Skipping slide without a team name")
        return None

    config = config or get_section_config()
    team = ParsedTeam(name=name, lead=_first_text(slide, DeckSelectors.TEAM_LEAD))

    for spec in config.sections:
        setattr(team, spec.key, collect_section(slide, spec, config))

    counts = team.item_counts
    _log_debug(
        f"Team '{team.name}' (lead: '{team.lead}'): "
        + ", ".join(f"{count} {kind}" for kind, count in counts.items())
    )
    return team
