#!/usr/bin/env python3
"""
Show report store statistics.

Prints entity counts, the latest report with its per-team item totals, and
every report date in the store.

Usage:
    python scripts/validate_database.py
    python scripts/validate_database.py --db data/statusdeck.db
"""

from pathlib import Path

import typer

from statusdeck.contexts.storage import DatabaseNotFoundError, ReportDatabase
from statusdeck.contexts.storage.report_database import ITEM_TABLES, REPORT_DB_PATH
from statusdeck.utils.report_formatter import Column, TableFormatter, format_count_table

app = typer.Typer(add_completion=False)


@app.command()
def main(
    db_path: Path = typer.Option(REPORT_DB_PATH, "--db", "-d", help="SQLite store path"),
):
    """Print store statistics."""
    try:
        db = ReportDatabase(db_path)
    except DatabaseNotFoundError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        typer.echo(format_count_table(f"STORE: {db_path}", db.counts()))

        latest = db.get_latest_report()
        if latest is None:
            typer.echo("\nNo reports in store.")
            return

        columns = [Column("Team", 22), Column("Lead", 16)]
        columns += [Column(table[:6].capitalize(), 5, ">") for table in ITEM_TABLES]
        table = TableFormatter(columns, total_width=66)
        table.add_section_header(f"LATEST: {latest['period_end_date']}  {latest['title']}")
        table.add_table_header().add_separator()
        for team in latest["teams"]:
            table.add_row(
                [team["team_name"][:22], team["team_lead_name"][:16]]
                + [len(team[kind]) for kind in ITEM_TABLES]
            )
        table.add_separator("=")
        typer.echo("\n" + table.render())

        reports = db.list_reports()
        typer.echo(f"\nReports ({len(reports)}):")
        for report in reports:
            status = "" if report["published"] else " (unpublished)"
            typer.echo(f"  {report['period_end_date']}  {report['title']}{status}")
    finally:
        db.close()


if __name__ == "__main__":
    app()
