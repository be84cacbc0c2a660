"""Unit tests for the text table formatter."""

import pytest

from statusdeck.utils.report_formatter import Column, TableFormatter, format_count_table


@pytest.mark.unit
def test_table_rows_are_aligned():
    table = TableFormatter([Column("Entity", 10), Column("Count", 5, ">")], total_width=16)
    table.add_table_header().add_separator().add_row(["reports", 3])

    lines = table.render().split("\n")

    assert lines[0] == "Entity     Count"
    assert lines[1] == "-" * 16
    assert lines[2] == "reports        3"


@pytest.mark.unit
def test_add_row_length_mismatch():
    table = TableFormatter([Column("A", 3), Column("B", 3)])
    with pytest.raises(ValueError):
        table.add_row(["only one"])


@pytest.mark.unit
def test_count_table_marks_mismatches():
    rendered = format_count_table(
        "VALIDATION",
        {"reports": 2, "goals": 3, "risks": 1},
        {"reports": 2, "goals": 4},
    )

    lines = rendered.split("\n")
    assert lines[1] == "VALIDATION"

    rows = {line.split()[0]: line.split()[1:] for line in lines[5:-1]}
    assert rows["reports"] == ["2", "2", "ok"]
    assert rows["goals"] == ["3", "4", "MISMATCH"]
    assert rows["risks"] == ["1", "-"]


@pytest.mark.unit
def test_count_table_without_expected():
    rendered = format_count_table("STORE", {"teams": 3})

    assert "Expected" not in rendered
    assert "teams" in rendered
