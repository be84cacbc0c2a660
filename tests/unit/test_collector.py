"""Unit tests for section box item collection."""

import pytest
from bs4 import BeautifulSoup

from statusdeck.contexts.ingest.collector import (
    collect_grouped_items,
    collect_section,
    collect_simple_items,
    find_section_box,
    title_matches,
)
from statusdeck.contexts.ingest.section_config import get_section_config

PLACEHOLDERS = ("No blockers", "No critical risks", "no blockers", "N/A")


def _box(inner_html: str, title: str = "Section"):
    html = f'<div class="section-box"><div class="section-title">{title}</div>{inner_html}</div>'
    return BeautifulSoup(html, "html.parser").select_one(".section-box")


def _slide(inner_html: str):
    return BeautifulSoup(f'<div class="slide">{inner_html}</div>', "html.parser").select_one(
        ".slide"
    )


@pytest.mark.unit
class TestTitleMatches:
    """Substring matching of section box titles."""

    def test_exact_title(self):
        assert title_matches("Goals This Period", "Goals This Period")

    def test_truncated_fragment_absorbs_wording_drift(self):
        assert title_matches("Blockers / Work Arounds", "Blockers")

    def test_unrelated_title(self):
        assert not title_matches("Goals This Period", "Accomplishments Last Period")

    def test_case_sensitive(self):
        assert not title_matches("goals this period", "Goals This Period")


@pytest.mark.unit
class TestGroupedCollector:
    """Accomplishments/goals collection."""

    def test_items_without_subheading_get_general(self):
        box = _box("<ul><li>Build pipeline</li><li>Ship release</li></ul>")
        items = collect_grouped_items(box, "General")

        assert [item.section for item in items] == ["General", "General"]
        assert [item.description for item in items] == ["Build pipeline", "Ship release"]

    def test_subheadings_label_following_lists(self):
        box = _box(
            "<ul><li>Before any heading</li></ul>"
            "<h3>In Progress</h3><ul><li>A</li></ul>"
            "<h3> In QA </h3><ul><li>B</li><li>C</li></ul>"
        )
        items = collect_grouped_items(box, "General")

        assert [(item.section, item.description) for item in items] == [
            ("General", "Before any heading"),
            ("In Progress", "A"),
            ("In QA", "B"),
            ("In QA", "C"),
        ]

    def test_ticket_link_is_extracted_and_stripped(self):
        url = "https://dev.example.com/_search?type=workitem&amp;text=89536"
        box = _box(f'<ul><li><a href="{url}">Fix login redirect - (89536)</a></li></ul>')
        item = collect_grouped_items(box, "General")[0]

        assert item.ticket_id == "89536"
        assert item.ticket_url == "https://dev.example.com/_search?type=workitem&text=89536"
        assert item.description == "Fix login redirect"

    def test_empty_items_dropped(self):
        box = _box("<ul><li>  </li><li></li><li>Kept</li></ul>")
        assert [item.description for item in collect_grouped_items(box, "General")] == ["Kept"]

    def test_nested_list_items_not_flattened(self):
        box = _box("<ul><li>Parent<ul><li>Child</li></ul></li></ul>")
        items = collect_grouped_items(box, "General")

        assert len(items) == 1
        assert items[0].description.startswith("Parent")

    def test_wrapper_div_is_walked(self):
        box = _box('<div class="section-body"><h3>Done</h3><ul><li>A</li></ul></div>')
        items = collect_grouped_items(box, "General")

        assert [(item.section, item.description) for item in items] == [("Done", "A")]

    def test_paragraphs_ignored(self):
        box = _box("<p>Just a note</p>")
        assert collect_grouped_items(box, "General") == []


@pytest.mark.unit
class TestSimpleCollector:
    """Blockers/risks collection."""

    def test_items_without_subheading_have_no_section(self):
        box = _box("<ul><li>Waiting on keys</li></ul>")
        items = collect_simple_items(box, PLACEHOLDERS)

        assert items[0].section is None
        assert items[0].description == "Waiting on keys"

    def test_subheading_applies(self):
        box = _box("<h3>Vendor</h3><ul><li>Late renewal</li></ul>")
        assert collect_simple_items(box, PLACEHOLDERS)[0].section == "Vendor"

    def test_italic_placeholder_means_empty(self):
        box = _box('<p style="font-style: italic;">No blockers for this period</p>')
        assert collect_simple_items(box, PLACEHOLDERS) == []

    def test_emphasis_placeholder_means_empty(self):
        box = _box("<p><em>No critical risks</em></p><ul><li>Ignored</li></ul>")
        assert collect_simple_items(box, PLACEHOLDERS) == []

    def test_placeholder_match_is_case_sensitive(self):
        box = _box('<p style="font-style: italic">NO BLOCKERS</p>')
        items = collect_simple_items(box, PLACEHOLDERS)

        assert [item.description for item in items] == ["NO BLOCKERS"]

    def test_paragraph_fallback(self):
        box = _box("<p>Release freeze may slip</p><p> </p><p>N/A</p><p>Key engineer on leave</p>")
        items = collect_simple_items(box, PLACEHOLDERS)

        assert [item.description for item in items] == [
            "Release freeze may slip",
            "Key engineer on leave",
        ]
        assert all(item.section is None and item.ticket_id is None for item in items)

    def test_list_items_take_precedence_over_paragraphs(self):
        box = _box("<p>Context paragraph</p><ul><li>Real blocker</li></ul>")
        items = collect_simple_items(box, PLACEHOLDERS)

        assert [item.description for item in items] == ["Real blocker"]


@pytest.mark.unit
class TestSectionSelection:
    """Choosing the section box on a slide."""

    def test_first_matching_box_wins(self):
        slide = _slide(
            '<div class="section-box"><div class="section-title">Goals This Period</div>'
            "<ul><li>First</li></ul></div>"
            '<div class="section-box"><div class="section-title">Goals This Period (cont.)</div>'
            "<ul><li>Second</li></ul></div>"
        )
        config = get_section_config()
        items = collect_section(slide, config.get("goals"), config)

        assert [item.description for item in items] == ["First"]

    def test_missing_box_yields_empty(self):
        slide = _slide('<div class="section-box"><div class="section-title">Other</div></div>')
        config = get_section_config()

        assert find_section_box(slide, "Goals This Period") is None
        assert collect_section(slide, config.get("goals"), config) == []

    def test_blockers_title_variant_matches(self):
        slide = _slide(
            '<div class="section-box"><div class="section-title">Blockers / Work Arounds</div>'
            "<ul><li>- Awaiting API keys</li></ul></div>"
        )
        config = get_section_config()
        items = collect_section(slide, config.get("blockers"), config)

        assert [item.description for item in items] == ["Awaiting API keys"]
