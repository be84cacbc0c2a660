#!/usr/bin/env python3
"""
Parse a meeting transcript with an LLM and optionally load it into the store.

Usage:
    python scripts/parse_transcript.py notes.txt 2025-11-24
    python scripts/parse_transcript.py notes.txt 2025-11-24 --provider openai --output report.yaml
    python scripts/parse_transcript.py notes.txt 2025-11-24 --load --on-conflict replace
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from omegaconf import OmegaConf

from statusdeck.contexts.ingest.exceptions import TranscriptParsingError
from statusdeck.contexts.ingest.logger import setup_ingest_logger
from statusdeck.contexts.ingest.transcript import parse_transcript
from statusdeck.contexts.storage import (
    ConflictPolicy,
    ReferenceResolver,
    ReportDatabase,
    load_reports,
)
from statusdeck.contexts.storage.report_database import REPORT_DB_PATH
from statusdeck.utils.logger import session_log_dir

app = typer.Typer(add_completion=False)


@app.command()
def main(
    transcript_file: Path = typer.Argument(..., help="Transcript text file"),
    period_end_date: datetime = typer.Argument(
        ..., formats=["%Y-%m-%d"], help="Period-end date (YYYY-MM-DD)"
    ),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Report title"),
    provider: Optional[str] = typer.Option(None, "--provider", help="anthropic or openai"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the parsed report as YAML"
    ),
    load: bool = typer.Option(False, "--load", help="Load the parsed report into the store"),
    db: Path = typer.Option(REPORT_DB_PATH, "--db", "-d", help="SQLite store path"),
    on_conflict: ConflictPolicy = typer.Option(
        ConflictPolicy.ERROR, "--on-conflict", case_sensitive=False
    ),
):
    """Extract a report from meeting notes."""
    if not transcript_file.exists():
        typer.echo(f"ERROR: Transcript not found: {transcript_file}", err=True)
        raise typer.Exit(code=1)

    setup_ingest_logger(session_log_dir("transcript"), source="transcript")

    try:
        report = parse_transcript(
            transcript_file.read_text(encoding="utf-8"),
            period_end_date.date(),
            title=title,
            provider=provider,
            model=model,
            source=transcript_file.name,
        )
    except (TranscriptParsingError, ValueError, ImportError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)

    counts = report.item_counts
    typer.echo(f"\n{report.title}: {len(report.teams)} team(s)")
    for team in report.teams:
        totals = ", ".join(f"{n} {kind}" for kind, n in team.item_counts.items())
        typer.echo(f"  {team.name} ({team.lead or 'no lead'}): {totals}")
    typer.echo("Totals: " + ", ".join(f"{n} {kind}" for kind, n in counts.items()))

    if output:
        OmegaConf.save(OmegaConf.create(report.to_dict()), output)
        typer.echo(f"\nSaved: {output}")

    if load:
        store = ReportDatabase.create(db)
        try:
            references = ReferenceResolver(store).resolve([report])
            result = load_reports(store, [report], references, on_conflict=on_conflict)
        finally:
            store.close()

        if result.reports_failed:
            typer.echo(f"ERROR: {result.report_failures[0].error}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"\nLoaded into {db} ({result.teams_loaded} team(s))")


if __name__ == "__main__":
    app()
