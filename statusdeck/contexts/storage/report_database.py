"""
Persistent SQLite store for status reports.

Relational layout:
- teams, team_leads: shared reference entities keyed by unique name
- reports: one row per period-end date (stored as YYYY-MM-DD text)
- report_teams: one team's contribution to one report, ordered by display_order
- accomplishments, goals, blockers, risks: items owned by a report_team

Deleting a report cascades to its report_teams and their items. Teams and
leads are only ever referenced, so they survive report deletion.
"""

import os
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from dotenv import load_dotenv

from statusdeck.contexts.storage.exceptions import DatabaseNotFoundError, DuplicateReportError
from statusdeck.utils.timestamp import format_date

load_dotenv()
REPORT_DB_PATH = Path(os.getenv("REPORT_DB_PATH", "data/statusdeck.db"))

ITEM_TABLES = ("accomplishments", "goals", "blockers", "risks")

# Entity kind -> table, in reporting order
ENTITY_TABLES = {
    "teams": "teams",
    "team_leads": "team_leads",
    "reports": "reports",
    "report_teams": "report_teams",
    "accomplishments": "accomplishments",
    "goals": "goals",
    "blockers": "blockers",
    "risks": "risks",
}

# Joins from a report-owned table up to its report (aliased r)
SCOPED_COUNT_JOINS = {
    "reports": "r",
    "report_teams": "rt JOIN reports r ON r.id = rt.report_id",
    **{
        table: (
            f"i JOIN report_teams rt ON rt.id = i.report_team_id "
            f"JOIN reports r ON r.id = rt.report_id"
        )
        for table in ITEM_TABLES
    },
}

# Insertable columns per item table (display_order is assigned on insert)
ITEM_COLUMNS = {
    "accomplishments": ("section_name", "description", "ticket_id", "ticket_url"),
    "goals": ("section_name", "description", "ticket_id", "ticket_url"),
    "blockers": ("description", "ticket_id", "ticket_url", "workaround"),
    "risks": ("description", "severity", "mitigation"),
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS teams (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    slug TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS team_leads (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS reports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    period_end_date TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    published INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS report_teams (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    report_id INTEGER NOT NULL REFERENCES reports(id) ON DELETE CASCADE,
    team_id INTEGER NOT NULL REFERENCES teams(id) ON DELETE RESTRICT,
    team_lead_id INTEGER NOT NULL REFERENCES team_leads(id) ON DELETE RESTRICT,
    display_order INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS accomplishments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    report_team_id INTEGER NOT NULL REFERENCES report_teams(id) ON DELETE CASCADE,
    section_name TEXT NOT NULL,
    description TEXT NOT NULL,
    ticket_id TEXT,
    ticket_url TEXT,
    display_order INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS goals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    report_team_id INTEGER NOT NULL REFERENCES report_teams(id) ON DELETE CASCADE,
    section_name TEXT NOT NULL,
    description TEXT NOT NULL,
    ticket_id TEXT,
    ticket_url TEXT,
    display_order INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS blockers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    report_team_id INTEGER NOT NULL REFERENCES report_teams(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    ticket_id TEXT,
    ticket_url TEXT,
    workaround TEXT,
    display_order INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS risks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    report_team_id INTEGER NOT NULL REFERENCES report_teams(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    severity TEXT NOT NULL DEFAULT 'medium' CHECK (severity IN ('low', 'medium', 'high')),
    mitigation TEXT,
    display_order INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_report_teams_report ON report_teams(report_id);
CREATE INDEX IF NOT EXISTS idx_accomplishments_report_team ON accomplishments(report_team_id);
CREATE INDEX IF NOT EXISTS idx_goals_report_team ON goals(report_team_id);
CREATE INDEX IF NOT EXISTS idx_blockers_report_team ON blockers(report_team_id);
CREATE INDEX IF NOT EXISTS idx_risks_report_team ON risks(report_team_id);
"""


class ReportDatabase:
    """
    SQLite store for reports, teams and their items.

    The database is persistent: create it once with ReportDatabase.create(),
    then open it later by instantiating with the db_path.

    Write methods commit before returning. create_report_team() writes the
    join row and all four item lists in a single transaction.
    """

    def __init__(self, db_path: Path):
        """
        Open an existing database.

        Args:
            db_path: Path to existing SQLite database file

        Raises:
            DatabaseNotFoundError: If database file doesn't exist
        """
        self.db_path = Path(db_path)

        if not self.db_path.exists():
            raise DatabaseNotFoundError(self.db_path)

        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

    @classmethod
    def create(cls, db_path: Path, overwrite: bool = False) -> "ReportDatabase":
        """
        Create the schema (if missing) and open the database.

        Existing data is kept unless overwrite is set.

        Args:
            db_path: Path where database will be created
            overwrite: Delete an existing database file first

        Returns:
            Opened ReportDatabase
        """
        db_path = Path(db_path)
        if overwrite and db_path.exists():
            db_path.unlink()

        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(db_path))
        conn.executescript(SCHEMA)
        conn.commit()
        conn.close()

        return cls(db_path)

    def close(self):
        self.conn.close()

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Execute SQL query and return results as list of dicts.

        Args:
            sql: SQL query string
            params: Query parameters (for parameterized queries)

        Returns:
            List of dicts with column names as keys
        """
        cursor = self.conn.execute(sql, tuple(params))
        return [dict(row) for row in cursor.fetchall()]

    def _query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Reference entities
    # ------------------------------------------------------------------

    def upsert_team(self, name: str, slug: str) -> int:
        """
        Create a team if no team has this name, and return its id.

        An existing team keeps its original slug.

        Raises:
            sqlite3.IntegrityError: If slug belongs to a different team
        """
        with self.conn:
            self.conn.execute(
                "INSERT INTO teams (name, slug) VALUES (?, ?) ON CONFLICT(name) DO NOTHING",
                (name, slug),
            )
        return self._query_one("SELECT id FROM teams WHERE name = ?", (name,))["id"]

    def upsert_team_lead(self, name: str) -> int:
        """Create a team lead if no lead has this name, and return its id."""
        with self.conn:
            self.conn.execute(
                "INSERT INTO team_leads (name) VALUES (?) ON CONFLICT(name) DO NOTHING",
                (name,),
            )
        return self._query_one("SELECT id FROM team_leads WHERE name = ?", (name,))["id"]

    def get_team_slug_map(self) -> Dict[str, str]:
        """Existing team name -> slug."""
        return {row["name"]: row["slug"] for row in self.query("SELECT name, slug FROM teams")}

    def list_teams(self) -> List[Dict[str, Any]]:
        return self.query("SELECT id, name, slug FROM teams ORDER BY name")

    def list_team_leads(self) -> List[Dict[str, Any]]:
        return self.query("SELECT id, name FROM team_leads ORDER BY name")

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def create_report(self, period_end_date: date, title: str, published: bool = True) -> int:
        """
        Insert a report row and return its id.

        Raises:
            DuplicateReportError: If a report with this period-end date exists
        """
        try:
            with self.conn:
                cursor = self.conn.execute(
                    "INSERT INTO reports (period_end_date, title, published) VALUES (?, ?, ?)",
                    (format_date(period_end_date), title, int(published)),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateReportError(period_end_date, e)
        return cursor.lastrowid

    def get_report_id_by_date(self, period_end_date: date) -> Optional[int]:
        row = self._query_one(
            "SELECT id FROM reports WHERE period_end_date = ?", (format_date(period_end_date),)
        )
        return row["id"] if row else None

    def reset_report(self, report_id: int, title: str, published: bool = True) -> int:
        """
        Update a report's title/published flag and delete all of its teams.

        Runs as one transaction; item rows go with their report_teams through
        the cascade. The report keeps its id and period-end date.

        Returns:
            Number of report_teams deleted
        """
        with self.conn:
            self.conn.execute(
                "UPDATE reports SET title = ?, published = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (title, int(published), report_id),
            )
            cursor = self.conn.execute("DELETE FROM report_teams WHERE report_id = ?", (report_id,))
        return cursor.rowcount

    def delete_report(self, report_id: int) -> bool:
        """Delete a report and everything it owns. Returns False if no such report."""
        with self.conn:
            cursor = self.conn.execute("DELETE FROM reports WHERE id = ?", (report_id,))
        return cursor.rowcount > 0

    def create_report_team(
        self,
        report_id: int,
        team_id: int,
        team_lead_id: int,
        display_order: int,
        items: Dict[str, List[Dict[str, Any]]],
    ) -> int:
        """
        Insert one team's contribution to a report, all or nothing.

        Args:
            report_id: Owning report
            team_id: Referenced team
            team_lead_id: Referenced team lead
            display_order: Position of the team within the report
            items: Item table name -> row dicts (keys from ITEM_COLUMNS);
                each row's display_order is its index in its list

        Returns:
            New report_team id

        Raises:
            sqlite3.Error: If any insert fails (nothing is kept)
        """
        with self.conn:
            cursor = self.conn.execute(
                "INSERT INTO report_teams (report_id, team_id, team_lead_id, display_order) "
                "VALUES (?, ?, ?, ?)",
                (report_id, team_id, team_lead_id, display_order),
            )
            report_team_id = cursor.lastrowid

            for table in ITEM_TABLES:
                self._insert_items(table, report_team_id, items.get(table, []))

        return report_team_id

    def _insert_items(self, table: str, report_team_id: int, rows: List[Dict[str, Any]]):
        columns = ITEM_COLUMNS[table]
        placeholders = ", ".join("?" * (len(columns) + 2))
        sql = (
            f"INSERT INTO {table} (report_team_id, {', '.join(columns)}, display_order) "
            f"VALUES ({placeholders})"
        )
        self.conn.executemany(
            sql,
            [
                (report_team_id, *(row.get(column) for column in columns), idx)
                for idx, row in enumerate(rows)
            ],
        )

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def list_reports(self) -> List[Dict[str, Any]]:
        """All reports (without teams), oldest period first."""
        rows = self.query(
            "SELECT id, period_end_date, title, published FROM reports ORDER BY period_end_date"
        )
        for row in rows:
            row["published"] = bool(row["published"])
        return rows

    def get_report_by_date(self, period_end_date: date) -> Optional[Dict[str, Any]]:
        """
        Load a report with its teams and items, all in display order.

        Returns:
            Nested dict (report columns plus `teams`, each team with its lead
            and the four item lists), or None if there is no such report
        """
        row = self._query_one(
            "SELECT * FROM reports WHERE period_end_date = ?", (format_date(period_end_date),)
        )
        return self._load_report(row) if row else None

    def get_latest_report(self) -> Optional[Dict[str, Any]]:
        """Report with the most recent period-end date, nested as get_report_by_date()."""
        row = self._query_one("SELECT * FROM reports ORDER BY period_end_date DESC LIMIT 1")
        return self._load_report(row) if row else None

    def _load_report(self, report: Dict[str, Any]) -> Dict[str, Any]:
        report["published"] = bool(report["published"])
        teams = self.query(
            """
            SELECT rt.id, rt.display_order,
                   t.id AS team_id, t.name AS team_name, t.slug AS team_slug,
                   l.id AS team_lead_id, l.name AS team_lead_name
            FROM report_teams rt
            JOIN teams t ON t.id = rt.team_id
            JOIN team_leads l ON l.id = rt.team_lead_id
            WHERE rt.report_id = ?
            ORDER BY rt.display_order
            """,
            (report["id"],),
        )
        for team in teams:
            for table in ITEM_TABLES:
                team[table] = self.query(
                    f"SELECT * FROM {table} WHERE report_team_id = ? ORDER BY display_order",
                    (team["id"],),
                )
        report["teams"] = teams
        return report

    def count(self, kind: str, period_end_dates: Optional[Iterable[date]] = None) -> int:
        """
        Count rows of one entity kind.

        Args:
            kind: Key of ENTITY_TABLES
            period_end_dates: Only count rows belonging to reports with these
                dates (report-owned kinds only)

        Raises:
            KeyError: If kind is not in ENTITY_TABLES
            ValueError: If period_end_dates is given for teams or team_leads
        """
        table = ENTITY_TABLES[kind]
        if period_end_dates is None:
            return self._query_one(f"SELECT COUNT(*) AS n FROM {table}")["n"]

        if kind not in SCOPED_COUNT_JOINS:
            raise ValueError(f"'{kind}' rows are not owned by a report")

        dates = sorted({format_date(value) for value in period_end_dates})
        if not dates:
            return 0

        placeholders = ", ".join("?" * len(dates))
        sql = (
            f"SELECT COUNT(*) AS n FROM {table} {SCOPED_COUNT_JOINS[kind]} "
            f"WHERE r.period_end_date IN ({placeholders})"
        )
        return self._query_one(sql, dates)["n"]

    def counts(self) -> Dict[str, int]:
        """Row counts for every entity kind."""
        return {kind: self.count(kind) for kind in ENTITY_TABLES}
