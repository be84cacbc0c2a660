"""
Reference resolution for teams and team leads.

Teams and leads are shared across reports, so they are upserted by name once
per run before any report is loaded. The resulting name -> id maps are
handed to the loader explicitly.
"""

import sqlite3
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from statusdeck.contexts.ingest.report_data_structure import ParsedReport
from statusdeck.contexts.storage.logger import (
    _log_info,
    log_reference_failed,
    log_reference_resolved,
)
from statusdeck.contexts.storage.report_database import ReportDatabase
from statusdeck.utils.text_processing import slugify, unique_slug


@dataclass
class ResolvedReferences:
    """Name -> store id maps. A name missing from a map failed to resolve."""

    team_ids: Dict[str, int] = field(default_factory=dict)
    lead_ids: Dict[str, int] = field(default_factory=dict)

    def team_id(self, name: str) -> Optional[int]:
        return self.team_ids.get(name)

    def lead_id(self, name: str) -> Optional[int]:
        return self.lead_ids.get(name)


def distinct_team_names(reports: Iterable[ParsedReport]) -> List[str]:
    """Distinct team names in order of first appearance."""
    return list(dict.fromkeys(team.name for report in reports for team in report.teams))


def distinct_lead_names(reports: Iterable[ParsedReport]) -> List[str]:
    """Distinct lead names (including "") in order of first appearance."""
    return list(dict.fromkeys(team.lead for report in reports for team in report.teams))


class ReferenceResolver:
    """
    Upserts teams and leads and records their ids.

    Slugs are derived from team names and made unique against every slug
    already in the store plus those assigned earlier in the same run. A team
    that already exists keeps its stored slug.
    """

    def __init__(self, db: ReportDatabase):
        self.db = db

    def resolve(self, reports: List[ParsedReport]) -> ResolvedReferences:
        """
        Resolve every team and lead referenced by the reports.

        A failed upsert is logged and leaves the name out of its map; teams
        that reference it are skipped by the loader.
        """
        references = ResolvedReferences()

        team_names = distinct_team_names(reports)
        lead_names = distinct_lead_names(reports)
        _log_info(f"Resolving {len(team_names)} team(s) and {len(lead_names)} lead(s)")

        existing_slugs = self.db.get_team_slug_map()
        used_slugs = set(existing_slugs.values())

        for name in team_names:
            slug = existing_slugs.get(name) or unique_slug(slugify(name), used_slugs)
            try:
                team_id = self.db.upsert_team(name, slug)
            except sqlite3.Error as e:
                log_reference_failed("Team", name, e)
                continue
            used_slugs.add(slug)
            references.team_ids[name] = team_id
            log_reference_resolved("Team", name, team_id)

        for name in lead_names:
            try:
                lead_id = self.db.upsert_team_lead(name)
            except sqlite3.Error as e:
                log_reference_failed("Lead", name, e)
                continue
            references.lead_ids[name] = lead_id
            log_reference_resolved("Lead", name, lead_id)

        return references
