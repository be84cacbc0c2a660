"""
Storage Context

Responsibilities:
- Holds reports, teams, leads and items in a relational SQLite store
- Resolves shared references (teams, leads) by name once per run
- Loads parsed reports, one atomic ReportTeam at a time
- Audits a load by re-counting entities

Owns: Schema, reference resolution, load policy, count validation
Never: Reads report documents (consumes ParsedReport records from ingest)
"""

from statusdeck.contexts.storage.exceptions import (
    DatabaseNotFoundError,
    DuplicateReportError,
    StoreError,
)
from statusdeck.contexts.storage.loader import ConflictPolicy, LoadResult, load_reports
from statusdeck.contexts.storage.migration import MigrationResult, run_migration
from statusdeck.contexts.storage.report_database import ReportDatabase
from statusdeck.contexts.storage.resolver import ReferenceResolver, ResolvedReferences
from statusdeck.contexts.storage.validator import ValidationResult, validate_load

__all__ = [
    # Store
    "ReportDatabase",
    # Pipeline
    "ReferenceResolver",
    "ResolvedReferences",
    "ConflictPolicy",
    "LoadResult",
    "load_reports",
    "ValidationResult",
    "validate_load",
    "MigrationResult",
    "run_migration",
    # Errors
    "StoreError",
    "DuplicateReportError",
    "DatabaseNotFoundError",
]
