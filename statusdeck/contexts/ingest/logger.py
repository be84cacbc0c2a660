"""
Ingest context logger.

Provides logging interface for the ingest context with automatic [ingest] prefix.
All ingest modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from statusdeck.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[ingest]"


def setup_ingest_logger(log_dir: Path, source: str = "html") -> Path:
    """
    Setup logger for an ingest-only session.

    Args:
        log_dir: Directory for this session
        source: Ingestion path for provenance ("html" or "transcript")

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="ingest",
        log_dir=log_dir,
        extra_provenance={"Source": source},
    )


def _log_info(message: str) -> None:
    """Log info message with [ingest] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [ingest] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [ingest] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [ingest] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [ingest] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_batch_start(directory: Path, file_count: int) -> None:
    """Log start of a batch parse."""
    _log_info(f"Found {file_count} report file(s) to parse in {directory}")


def log_parse_result(file_name: str, outcome) -> None:
    """
    Log one document's parse outcome.

    Args:
        file_name: Source file name
        outcome: ParseOutcome from the batch parser
    """
    if outcome.success:
        _log_success(f"{file_name}: parsed {len(outcome.report.teams)} team(s)")
    else:
        _log_error(f"{file_name}: parse failed")
        _log_error(f"  Error: {outcome.error}")


def log_batch_summary(result) -> None:
    """Log batch totals from a BatchParseResult."""
    total = len(result.outcomes)
    if result.failure_count:
        _log_warning(f"Parsed {result.success_count}/{total} report(s), {result.failure_count} failed")
        for outcome in result.failed:
            _log_warning(f"  - {outcome.file_name}: {outcome.error}")
    else:
        _log_success(f"Parsed {result.success_count}/{total} report(s)")
