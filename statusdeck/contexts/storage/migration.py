"""
End-to-end migration: parse a directory of decks, then resolve, load, validate.

Parsing finishes for the whole batch before the store is touched. Per-document
and per-team failures are recorded in the result; only errors that escape
run_migration() (missing directory, unusable store) are fatal.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from statusdeck.contexts.ingest.batch_parser import (
    REPORT_FILE_EXTENSION,
    BatchParseResult,
    parse_report_directory,
)
from statusdeck.contexts.ingest.section_config import SectionConfig
from statusdeck.contexts.storage.loader import ConflictPolicy, LoadResult, load_reports
from statusdeck.contexts.storage.logger import _log_info
from statusdeck.contexts.storage.report_database import ReportDatabase
from statusdeck.contexts.storage.resolver import ReferenceResolver, ResolvedReferences
from statusdeck.contexts.storage.validator import ValidationResult, validate_load
from statusdeck.utils.report_formatter import Column, TableFormatter, format_count_table

SUMMARY_WIDTH = 60


@dataclass
class MigrationResult:
    """Everything one migration run produced."""

    batch: BatchParseResult
    references: ResolvedReferences
    load: LoadResult
    validation: ValidationResult

    @property
    def passed(self) -> bool:
        return self.validation.passed

    def format_summary(self) -> str:
        """Human-readable run summary: parse, load and validation sections."""
        table = TableFormatter([Column("Step", 28), Column("Count", 10, ">")], SUMMARY_WIDTH)
        table.add_section_header("MIGRATION SUMMARY").add_table_header().add_separator()

        rows = [
            ("Documents parsed", self.batch.success_count),
            ("Documents failed", self.batch.failure_count),
            ("Teams resolved", len(self.references.team_ids)),
            ("Leads resolved", len(self.references.lead_ids)),
            ("Reports created", self.load.reports_created),
            ("Reports replaced", self.load.reports_replaced),
            ("Reports failed", self.load.reports_failed),
            ("Teams loaded", self.load.teams_loaded),
            ("Teams skipped", self.load.teams_skipped),
        ]
        rows.extend(
            (f"{kind.capitalize()} created", count) for kind, count in self.load.item_totals.items()
        )
        for label, count in rows:
            table.add_row([label, count])

        failures = [f"{o.file_name}: {o.error}" for o in self.batch.failed]
        failures += [f"{f.report}: {f.error}" for f in self.load.report_failures]
        failures += [f"{s.report} / {s.team}: {s.reason}" for s in self.load.team_skips]
        if failures:
            table.add_blank_line().add_text("Problems:")
            for line in failures:
                table.add_text(f"  - {line}")

        verdict = "PASSED" if self.validation.passed else "FAILED"
        validation_table = format_count_table(
            f"VALIDATION: {verdict}",
            self.validation.actual,
            self.validation.expected,
            total_width=SUMMARY_WIDTH,
        )
        return table.add_separator("=").add_blank_line().add_text(validation_table).render()


def run_migration(
    reports_dir: Path,
    db_path: Path,
    extension: str = REPORT_FILE_EXTENSION,
    on_conflict: ConflictPolicy = ConflictPolicy.ERROR,
    strict_dates: bool = False,
    reset: bool = False,
    config: Optional[SectionConfig] = None,
) -> MigrationResult:
    """
    Migrate a directory of report decks into the store.

    Args:
        reports_dir: Directory of report documents
        db_path: SQLite store (created if missing)
        extension: Document file extension
        on_conflict: Policy for period-end dates already in the store
        strict_dates: Fail documents whose title has no usable date
        reset: Delete the store file before loading
        config: Section definitions (defaults to the packaged sections.yaml)

    Returns:
        MigrationResult

    Raises:
        FileNotFoundError: If reports_dir doesn't exist
    """
    batch = parse_report_directory(
        reports_dir, extension=extension, strict_dates=strict_dates, config=config
    )
    reports = batch.reports

    db = ReportDatabase.create(db_path, overwrite=reset)
    try:
        _log_info(f"Store: {db_path}")
        references = ReferenceResolver(db).resolve(reports)
        load = load_reports(db, reports, references, on_conflict=on_conflict)
        validation = validate_load(
            db,
            expected_reports=batch.success_count,
            item_totals=load.item_totals,
            period_end_dates=[report.period_end_date for report in reports],
        )
    finally:
        db.close()

    return MigrationResult(batch=batch, references=references, load=load, validation=validation)
