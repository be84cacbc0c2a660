"""
Loading parsed reports into the store.

Reports are loaded in order. Each team is written as one ReportTeam with its
four item lists in a single transaction. A team whose team or lead failed to
resolve is skipped with a warning, and a report the store rejects is logged
and the run moves on to the next report.
"""

import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from statusdeck.contexts.ingest.report_data_structure import (
    DEFAULT_RISK_SEVERITY,
    DEFAULT_SECTION_NAME,
    ParsedReport,
    ParsedTeam,
)
from statusdeck.contexts.storage.exceptions import StoreError
from statusdeck.contexts.storage.logger import (
    _log_info,
    log_report_failed,
    log_report_loaded,
    log_team_skipped,
)
from statusdeck.contexts.storage.report_database import ITEM_TABLES, ReportDatabase
from statusdeck.contexts.storage.resolver import ResolvedReferences
from statusdeck.utils.timestamp import format_date


class ConflictPolicy(str, Enum):
    """What to do when a report's period-end date is already in the store."""

    ERROR = "error"
    REPLACE = "replace"


@dataclass
class ReportFailure:
    report: str
    error: str


@dataclass
class TeamSkip:
    report: str
    team: str
    reason: str


@dataclass
class LoadResult:
    """
    Totals accumulated while loading.

    item_totals only counts items of teams that were actually written, so it
    can be compared one-to-one with the store afterwards.
    """

    reports_created: int = 0
    reports_replaced: int = 0
    report_failures: List[ReportFailure] = field(default_factory=list)
    teams_loaded: int = 0
    team_skips: List[TeamSkip] = field(default_factory=list)
    item_totals: Dict[str, int] = field(default_factory=lambda: {table: 0 for table in ITEM_TABLES})

    @property
    def reports_loaded(self) -> int:
        return self.reports_created + self.reports_replaced

    @property
    def reports_failed(self) -> int:
        return len(self.report_failures)

    @property
    def teams_skipped(self) -> int:
        return len(self.team_skips)


def report_label(report: ParsedReport) -> str:
    label = format_date(report.period_end_date)
    return f"{label} ({report.source})" if report.source else label


def build_item_rows(team: ParsedTeam) -> Dict[str, List[Dict[str, Any]]]:
    """
    Map a parsed team's items onto store rows, in list order.

    Accomplishments and goals without a section get DEFAULT_SECTION_NAME;
    risks without a severity get DEFAULT_RISK_SEVERITY.
    """
    return {
        "accomplishments": [
            {
                "section_name": item.section or DEFAULT_SECTION_NAME,
                "description": item.description,
                "ticket_id": item.ticket_id,
                "ticket_url": item.ticket_url,
            }
            for item in team.accomplishments
        ],
        "goals": [
            {
                "section_name": item.section or DEFAULT_SECTION_NAME,
                "description": item.description,
                "ticket_id": item.ticket_id,
                "ticket_url": item.ticket_url,
            }
            for item in team.goals
        ],
        "blockers": [
            {
                "description": item.description,
                "ticket_id": item.ticket_id,
                "ticket_url": item.ticket_url,
                "workaround": item.workaround,
            }
            for item in team.blockers
        ],
        "risks": [
            {
                "description": item.description,
                "severity": item.severity or DEFAULT_RISK_SEVERITY,
                "mitigation": item.mitigation,
            }
            for item in team.risks
        ],
    }


def _open_report(
    db: ReportDatabase, report: ParsedReport, on_conflict: ConflictPolicy, published: bool
) -> tuple[int, bool]:
    """Create the report row, or reset the existing one under REPLACE. Returns (id, replaced)."""
    if on_conflict is ConflictPolicy.REPLACE:
        existing_id = db.get_report_id_by_date(report.period_end_date)
        if existing_id is not None:
            db.reset_report(existing_id, report.title, published)
            return existing_id, True

    return db.create_report(report.period_end_date, report.title, published), False


def _load_teams(
    db: ReportDatabase,
    report: ParsedReport,
    report_id: int,
    references: ResolvedReferences,
    result: LoadResult,
) -> int:
    """Write each team of a report. Returns how many were written."""
    label = report_label(report)
    loaded = 0

    for display_order, team in enumerate(report.teams):
        team_id = references.team_id(team.name)
        lead_id = references.lead_id(team.lead)
        if team_id is None or lead_id is None:
            reason = "team not resolved" if team_id is None else f"lead '{team.lead}' not resolved"
            log_team_skipped(label, team.name, reason)
            result.team_skips.append(TeamSkip(report=label, team=team.name, reason=reason))
            continue

        rows = build_item_rows(team)
        try:
            db.create_report_team(report_id, team_id, lead_id, display_order, rows)
        except sqlite3.Error as e:
            log_team_skipped(label, team.name, str(e))
            result.team_skips.append(TeamSkip(report=label, team=team.name, reason=str(e)))
            continue

        loaded += 1
        result.teams_loaded += 1
        for table, table_rows in rows.items():
            result.item_totals[table] += len(table_rows)

    return loaded


def load_reports(
    db: ReportDatabase,
    reports: List[ParsedReport],
    references: ResolvedReferences,
    on_conflict: ConflictPolicy = ConflictPolicy.ERROR,
    published: bool = True,
) -> LoadResult:
    """
    Load parsed reports into the store.

    Args:
        db: Open store
        reports: Successfully parsed reports, in load order
        references: Team/lead ids from the ReferenceResolver
        on_conflict: ERROR rejects a report whose date exists; REPLACE
            clears the existing report's teams and items and reloads it
        published: Published flag for created reports

    Returns:
        LoadResult with created/failed counts and item totals
    """
    result = LoadResult()
    _log_info(f"Loading {len(reports)} report(s) (on conflict: {on_conflict.value})")

    for report in reports:
        label = report_label(report)
        try:
            report_id, replaced = _open_report(db, report, on_conflict, published)
        except (StoreError, sqlite3.Error) as e:
            log_report_failed(label, e)
            result.report_failures.append(ReportFailure(report=label, error=str(e)))
            continue

        if replaced:
            result.reports_replaced += 1
        else:
            result.reports_created += 1

        loaded = _load_teams(db, report, report_id, references, result)
        log_report_loaded(label, loaded, len(report.teams), replaced)

    return result
