#!/usr/bin/env python3
"""
Migrate a directory of HTML status-report decks into the report store.

Parses every deck first, then upserts teams and leads, loads each report and
audits the store counts against the load totals.

Usage:
    python scripts/migrate_reports.py
    python scripts/migrate_reports.py weeks/ --db data/statusdeck.db
    python scripts/migrate_reports.py weeks/ --on-conflict replace --fail-on-mismatch
"""

from pathlib import Path

import typer
from loguru import logger

from statusdeck.contexts.ingest.batch_parser import REPORT_FILE_EXTENSION, REPORTS_PATH
from statusdeck.contexts.storage import ConflictPolicy, run_migration
from statusdeck.contexts.storage.logger import setup_store_logger
from statusdeck.contexts.storage.report_database import REPORT_DB_PATH
from statusdeck.utils.logger import session_log_dir

app = typer.Typer(add_completion=False)

# Exit code for a completed run whose count audit failed (with --fail-on-mismatch)
EXIT_VALIDATION_FAILED = 2


@app.command()
def main(
    reports_dir: Path = typer.Argument(REPORTS_PATH, help="Directory of report decks"),
    db: Path = typer.Option(REPORT_DB_PATH, "--db", "-d", help="SQLite store path"),
    extension: str = typer.Option(
        REPORT_FILE_EXTENSION, "--extension", "-e", help="Report file extension"
    ),
    on_conflict: ConflictPolicy = typer.Option(
        ConflictPolicy.ERROR,
        "--on-conflict",
        case_sensitive=False,
        help="Existing period-end date: 'error' skips the report, 'replace' reloads it",
    ),
    strict_dates: bool = typer.Option(
        False, "--strict-dates", help="Fail decks whose title has no MM.DD.YYYY date"
    ),
    reset: bool = typer.Option(False, "--reset", help="Delete the store before loading"),
    fail_on_mismatch: bool = typer.Option(
        False, "--fail-on-mismatch", help="Exit with code 2 when the count audit fails"
    ),
):
    """Parse report decks and load them into the store."""
    log_file = setup_store_logger(session_log_dir("migrate"), db)
    logger.info(f"Reports directory: {reports_dir}")

    try:
        result = run_migration(
            reports_dir,
            db,
            extension=extension,
            on_conflict=on_conflict,
            strict_dates=strict_dates,
            reset=reset,
        )
    except FileNotFoundError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        logger.exception(f"Migration failed: {e}")
        raise typer.Exit(code=1)

    typer.echo("")
    typer.echo(result.format_summary())
    typer.echo(f"\nLog: {log_file}")

    if fail_on_mismatch and not result.passed:
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)


if __name__ == "__main__":
    app()
