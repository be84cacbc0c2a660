"""Custom exceptions for the storage context."""

from datetime import date
from pathlib import Path
from typing import Optional


class StoreError(Exception):
    """Base class for store failures the loader handles per report or per team."""


class DuplicateReportError(StoreError):
    """
    Raised when a report with the same period-end date already exists.

    Attributes:
        period_end_date: The conflicting date
        original_error: The underlying sqlite3.IntegrityError
    """

    def __init__(self, period_end_date: date, original_error: Optional[Exception] = None):
        self.period_end_date = period_end_date
        self.original_error = original_error

        message = f"A report for period ending {period_end_date.isoformat()} already exists"
        if original_error:
            message += f" ({original_error})"
        super().__init__(message)


class DatabaseNotFoundError(StoreError, FileNotFoundError):
    """Raised when opening a store file that was never created."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        super().__init__(
            f"Database not found: {db_path}\n"
            f"To create a new database, use ReportDatabase.create()"
        )
