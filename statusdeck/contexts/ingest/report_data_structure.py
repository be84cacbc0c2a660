"""
Parsed report data structures for the Ingest context.

These records exist only between parsing and loading. Both ingestion paths
(HTML deck parser and transcript provider) produce the same shape, and the
Storage context loads them without distinguishing the source.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from statusdeck.utils.timestamp import format_date, parse_date

RISK_SEVERITIES = ("low", "medium", "high")
DEFAULT_RISK_SEVERITY = "medium"

# Section label for grouped items that have no sub-heading
DEFAULT_SECTION_NAME = "General"


@dataclass
class ParsedItem:
    """
    One bullet from a team section.

    Attributes:
        section: Nearest preceding sub-heading, the default label for grouped
            sections, or None for simple sections without sub-headings
        description: Item text with ticket reference and list prefix removed
        ticket_id: Work-item id extracted from the item's link
        ticket_url: The item's link, if any
        severity: Risk severity (transcript path only)
        workaround: Blocker workaround (transcript path only)
        mitigation: Risk mitigation (transcript path only)
    """

    section: Optional[str]
    description: str
    ticket_id: Optional[str] = None
    ticket_url: Optional[str] = None
    severity: Optional[str] = None
    workaround: Optional[str] = None
    mitigation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedItem":
        """
        Build an item from provider JSON.

        Accepts camelCase keys (ticketId) as emitted by the transcript
        provider and snake_case keys (ticket_id) as emitted by to_dict().
        """
        severity = _optional_str(data.get("severity"))
        if severity is not None:
            severity = severity.lower()
            if severity not in RISK_SEVERITIES:
                severity = None

        return cls(
            section=_optional_str(data.get("section") or data.get("sectionName")),
            description=str(data.get("description") or "").strip(),
            ticket_id=_optional_str(data.get("ticketId", data.get("ticket_id"))),
            ticket_url=_optional_str(data.get("ticketUrl", data.get("ticket_url"))),
            severity=severity,
            workaround=_optional_str(data.get("workaround")),
            mitigation=_optional_str(data.get("mitigation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section,
            "description": self.description,
            "ticket_id": self.ticket_id,
            "ticket_url": self.ticket_url,
            "severity": self.severity,
            "workaround": self.workaround,
            "mitigation": self.mitigation,
        }


@dataclass
class ParsedTeam:
    """
    One team's contribution to a report.

    `name` is never empty (teams without a name are dropped by the parser);
    `lead` may be the empty string but is never None.
    """

    name: str
    lead: str = ""
    accomplishments: List[ParsedItem] = field(default_factory=list)
    goals: List[ParsedItem] = field(default_factory=list)
    blockers: List[ParsedItem] = field(default_factory=list)
    risks: List[ParsedItem] = field(default_factory=list)

    @property
    def item_counts(self) -> Dict[str, int]:
        return {
            "accomplishments": len(self.accomplishments),
            "goals": len(self.goals),
            "blockers": len(self.blockers),
            "risks": len(self.risks),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedTeam":
        name = data.get("teamName", data.get("name")) or ""
        lead = data.get("teamLead", data.get("lead")) or ""
        return cls(
            name=str(name).strip(),
            lead=str(lead).strip(),
            accomplishments=_items_from_list(data.get("accomplishments")),
            goals=_items_from_list(data.get("goals")),
            blockers=_items_from_list(data.get("blockers")),
            risks=_items_from_list(data.get("risks")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "lead": self.lead,
            "accomplishments": [item.to_dict() for item in self.accomplishments],
            "goals": [item.to_dict() for item in self.goals],
            "blockers": [item.to_dict() for item in self.blockers],
            "risks": [item.to_dict() for item in self.risks],
        }


@dataclass
class ParsedReport:
    """
    One reporting period's deck.

    Downstream, a report is identified by period_end_date alone: the store
    holds at most one report per period-end date.
    """

    period_end_date: date
    title: str
    teams: List[ParsedTeam] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def item_counts(self) -> Dict[str, int]:
        """Per-kind item totals across all teams."""
        totals = {"accomplishments": 0, "goals": 0, "blockers": 0, "risks": 0}
        for team in self.teams:
            for kind, count in team.item_counts.items():
                totals[kind] += count
        return totals

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        period_end_date: Optional[date] = None,
        title: Optional[str] = None,
        source: Optional[str] = None,
    ) -> "ParsedReport":
        """
        Build a report from provider JSON or from to_dict() output.

        Teams without a name are dropped, as the HTML parser does.

        Args:
            data: Dict with a `teams` list, optionally `periodEndDate` /
                `period_end_date` (YYYY-MM-DD) and `title`
            period_end_date: Overrides the date in data
            title: Overrides the title in data
            source: Identifier of where the data came from

        Raises:
            ValueError: If teams is not a list or no period-end date is known
        """
        teams_raw = data.get("teams")
        if not isinstance(teams_raw, list):
            raise ValueError("Report data must contain a 'teams' list")

        if period_end_date is None:
            raw_date = data.get("periodEndDate", data.get("period_end_date"))
            if not raw_date:
                raise ValueError("Report data has no period-end date")
            period_end_date = parse_date(str(raw_date)[:10])

        teams = [ParsedTeam.from_dict(team) for team in teams_raw if isinstance(team, dict)]

        return cls(
            period_end_date=period_end_date,
            title=title if title is not None else str(data.get("title") or ""),
            teams=[team for team in teams if team.name],
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_end_date": format_date(self.period_end_date),
            "title": self.title,
            "teams": [team.to_dict() for team in self.teams],
        }


def _optional_str(value: Any) -> Optional[str]:
    """Strip a value to a string; None, empty and "null" become None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "null":
        return None
    return text


def _items_from_list(raw: Any) -> List[ParsedItem]:
    if not isinstance(raw, list):
        return []
    items = [ParsedItem.from_dict(entry) for entry in raw if isinstance(entry, dict)]
    return [item for item in items if item.description]
