"""
Integration tests for the parse -> resolve -> load -> validate pipeline.

Uses the decks in tests/fixtures/reports and a temporary SQLite store.
"""

from datetime import date
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from statusdeck.contexts.ingest.document_parser import parse_report_file
from statusdeck.contexts.ingest.report_data_structure import ParsedItem, ParsedReport, ParsedTeam
from statusdeck.contexts.storage.loader import ConflictPolicy, load_reports
from statusdeck.contexts.storage.migration import run_migration
from statusdeck.contexts.storage.report_database import ReportDatabase
from statusdeck.contexts.storage.resolver import ReferenceResolver, ResolvedReferences
from statusdeck.contexts.storage.validator import validate_load

FIXTURES_PATH = Path(__file__).parent.parent / "fixtures"
REPORTS_PATH = FIXTURES_PATH / "reports"


def _store_totals() -> dict:
    data = OmegaConf.to_container(OmegaConf.load(FIXTURES_PATH / "expected_reports.yaml"))
    return data["store_totals"]


def _report(day: int, *teams: ParsedTeam, title: str = "Status") -> ParsedReport:
    return ParsedReport(period_end_date=date(2025, 11, day), title=title, teams=list(teams))


def _list_lengths(team: dict) -> dict:
    return {key: len(value) for key, value in team.items() if isinstance(value, list)}


@pytest.fixture
def db(tmp_path):
    database = ReportDatabase.create(tmp_path / "reports.db")
    yield database
    database.close()


@pytest.mark.integration
def test_migration_round_trip(tmp_path):
    """Store counts after a migration equal the totals accumulated while parsing."""
    db_path = tmp_path / "reports.db"
    result = run_migration(REPORTS_PATH, db_path)

    assert result.batch.success_count == 2
    assert result.batch.failure_count == 1
    assert result.load.reports_created == 2
    assert result.load.teams_skipped == 0
    assert result.passed

    parsed_totals = {kind: 0 for kind in result.load.item_totals}
    for report in result.batch.reports:
        for kind, count in report.item_counts.items():
            parsed_totals[kind] += count
    assert result.load.item_totals == parsed_totals

    db = ReportDatabase(db_path)
    assert db.counts() == _store_totals()
    db.close()


@pytest.mark.integration
def test_migration_display_order_and_shared_references(tmp_path):
    """Cover slide is skipped, teams keep deck order, teams/leads are shared across reports."""
    db_path = tmp_path / "reports.db"
    run_migration(REPORTS_PATH, db_path)

    db = ReportDatabase(db_path)
    report = db.get_report_by_date(date(2025, 11, 24))

    assert [(t["team_name"], t["display_order"]) for t in report["teams"]] == [
        ("Platform", 0),
        ("Ops/Infra", 1),
    ]
    assert report["teams"][1]["team_lead_name"] == ""

    platform_ids = {
        team["team_id"]
        for day in (date(2025, 11, 24), date(2025, 12, 1))
        for team in db.get_report_by_date(day)["teams"]
        if team["team_name"] == "Platform"
    }
    assert len(platform_ids) == 1

    assert {team["slug"] for team in db.list_teams()} == {"platform", "ops-infra", "data-analytics"}

    accomplishments = report["teams"][0]["accomplishments"]
    assert [a["section_name"] for a in accomplishments] == ["Ready for UAT", "Ready for UAT", "In Production"]
    assert accomplishments[0]["ticket_id"] == "89536"
    assert accomplishments[0]["ticket_url"].endswith("text=89536")
    db.close()


@pytest.mark.integration
def test_rerun_rejects_existing_reports(tmp_path):
    """Loading the same decks again fails per report and creates nothing new."""
    db_path = tmp_path / "reports.db"
    run_migration(REPORTS_PATH, db_path)
    second = run_migration(REPORTS_PATH, db_path)

    assert second.load.reports_created == 0
    assert second.load.reports_failed == 2
    assert "already exists" in second.load.report_failures[0].error

    db = ReportDatabase(db_path)
    assert db.counts() == _store_totals()
    db.close()


@pytest.mark.integration
def test_rerun_with_replace_policy(tmp_path):
    """REPLACE keeps report ids and fully swaps out nested collections."""
    db_path = tmp_path / "reports.db"
    run_migration(REPORTS_PATH, db_path)

    db = ReportDatabase(db_path)
    original_id = db.get_report_id_by_date(date(2025, 11, 24))
    db.close()

    second = run_migration(REPORTS_PATH, db_path, on_conflict=ConflictPolicy.REPLACE)

    assert second.load.reports_replaced == 2
    assert second.load.reports_created == 0
    assert second.passed

    db = ReportDatabase(db_path)
    assert db.get_report_id_by_date(date(2025, 11, 24)) == original_id
    assert db.counts() == _store_totals()
    db.close()


@pytest.mark.integration
def test_replace_removes_prior_children(db):
    """No partial merge: the prior version's items are gone after a replace."""
    team = ParsedTeam(
        name="Platform",
        lead="Dana",
        goals=[ParsedItem("General", "old goal 1"), ParsedItem("General", "old goal 2")],
        blockers=[ParsedItem(None, "old blocker")],
    )
    first = _report(24, team, title="v1")
    references = ReferenceResolver(db).resolve([first])
    load_reports(db, [first], references)

    updated = _report(24, ParsedTeam(name="Platform", lead="Dana", goals=[ParsedItem("In QA", "new goal")]), title="v2")
    result = load_reports(db, [updated], references, on_conflict=ConflictPolicy.REPLACE)

    assert result.reports_replaced == 1
    stored = db.get_report_by_date(date(2025, 11, 24))
    assert stored["title"] == "v2"
    assert [g["description"] for g in stored["teams"][0]["goals"]] == ["new goal"]
    assert stored["teams"][0]["blockers"] == []
    assert db.count("goals") == 1
    assert db.count("blockers") == 0


@pytest.mark.integration
def test_unresolved_team_is_skipped(db):
    """A team missing from the reference maps is skipped; the rest of the report loads."""
    report = _report(
        24,
        ParsedTeam(name="Ghost", lead="Dana", goals=[ParsedItem("General", "x")]),
        ParsedTeam(name="Platform", lead="Dana", goals=[ParsedItem("General", "y")]),
    )
    references = ReferenceResolver(db).resolve([report])
    del references.team_ids["Ghost"]

    result = load_reports(db, [report], references)

    assert result.teams_loaded == 1
    assert [skip.team for skip in result.team_skips] == ["Ghost"]
    assert result.item_totals["goals"] == 1

    stored = db.get_report_by_date(date(2025, 11, 24))
    assert [(t["team_name"], t["display_order"]) for t in stored["teams"]] == [("Platform", 1)]


@pytest.mark.integration
def test_loader_defaults(db):
    """Missing section becomes General and missing risk severity becomes medium."""
    report = _report(
        24,
        ParsedTeam(
            name="Platform",
            accomplishments=[ParsedItem(None, "done")],
            risks=[ParsedItem(None, "slip"), ParsedItem(None, "outage", severity="high")],
        ),
    )
    load_reports(db, [report], ReferenceResolver(db).resolve([report]))

    team = db.get_report_by_date(date(2025, 11, 24))["teams"][0]
    assert team["accomplishments"][0]["section_name"] == "General"
    assert [r["severity"] for r in team["risks"]] == ["medium", "high"]
    assert team["team_lead_name"] == ""


@pytest.mark.integration
def test_resolver_slug_collisions(db):
    """Different names with the same slug get numeric suffixes, also against stored slugs."""
    db.upsert_team("Ops Infra", "ops-infra")
    report = _report(24, ParsedTeam(name="Ops/Infra"), ParsedTeam(name="ops-infra"), ParsedTeam(name="Ops Infra"))

    references = ReferenceResolver(db).resolve([report])

    assert set(references.team_ids) == {"Ops/Infra", "ops-infra", "Ops Infra"}
    slugs = {team["name"]: team["slug"] for team in db.list_teams()}
    assert slugs == {"Ops Infra": "ops-infra", "Ops/Infra": "ops-infra-1", "ops-infra": "ops-infra-2"}


@pytest.mark.integration
def test_resolver_dedupes_across_reports(db):
    reports = [
        _report(24, ParsedTeam(name="Platform", lead="Dana"), ParsedTeam(name="Ops/Infra")),
        _report(25, ParsedTeam(name="Platform", lead="Dana")),
    ]
    references = ReferenceResolver(db).resolve(reports)

    assert references == ResolvedReferences(
        team_ids={"Platform": 1, "Ops/Infra": 2},
        lead_ids={"Dana": 1, "": 2},
    )


@pytest.mark.integration
def test_validator_detects_mismatch(db):
    report = _report(24, ParsedTeam(name="Platform", goals=[ParsedItem("General", "g")]))
    load = load_reports(db, [report], ReferenceResolver(db).resolve([report]))

    ok = validate_load(db, expected_reports=1, item_totals=load.item_totals)
    assert ok.passed

    bad = validate_load(db, expected_reports=2, item_totals={**load.item_totals, "goals": 5})
    assert not bad.passed
    assert {check.kind for check in bad.mismatches} == {"reports", "goals"}


@pytest.mark.integration
def test_summary_mentions_problems(tmp_path):
    result = run_migration(REPORTS_PATH, tmp_path / "reports.db")
    summary = result.format_summary()

    assert "MIGRATION SUMMARY" in summary
    assert "VALIDATION: PASSED" in summary
    assert "empty_draft.html" in summary


@pytest.mark.integration
def test_missing_reports_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_migration(tmp_path / "nope", tmp_path / "reports.db")


@pytest.mark.integration
def test_transcript_and_deck_records_load_the_same_way(db):
    """A ParsedReport built from provider JSON loads like one parsed from a deck."""
    deck = parse_report_file(REPORTS_PATH / "status_12.01.2025.html")
    from_json = ParsedReport.from_dict(deck.to_dict())
    from_json.period_end_date = date(2025, 12, 8)

    references = ReferenceResolver(db).resolve([deck, from_json])
    result = load_reports(db, [deck, from_json], references)

    assert result.reports_created == 2
    first = db.get_report_by_date(date(2025, 12, 1))
    second = db.get_report_by_date(date(2025, 12, 8))
    assert [_list_lengths(t) for t in first["teams"]] == [_list_lengths(t) for t in second["teams"]]
