"""
Storage context logger.

Provides logging interface for the storage context with automatic [store] prefix.
All storage modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from statusdeck.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[store]"


def setup_store_logger(log_dir: Path, db_path: Path) -> Path:
    """
    Setup logger for a store session (migration or audit).

    Args:
        log_dir: Directory for this session
        db_path: Store file, recorded in provenance

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="store",
        log_dir=log_dir,
        extra_provenance={"Database": str(db_path)},
    )


def _log_info(message: str) -> None:
    """Log info message with [store] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [store] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [store] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [store] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [store] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level storage logging helpers


def log_reference_resolved(kind: str, name: str, ref_id: int) -> None:
    """Log one upserted team or lead."""
    _log_debug(f"{kind} '{name}' -> id {ref_id}")


def log_reference_failed(kind: str, name: str, error: Exception) -> None:
    _log_warning(f"Could not upsert {kind.lower()} '{name}': {error}")


def log_team_skipped(report_label: str, team_name: str, reason: str) -> None:
    """Log a team left out of a report."""
    _log_warning(f"{report_label}: skipping team '{team_name}' ({reason})")


def log_report_loaded(report_label: str, teams_loaded: int, teams_total: int, replaced: bool) -> None:
    verb = "Replaced" if replaced else "Created"
    _log_success(f"{verb} report {report_label} with {teams_loaded}/{teams_total} team(s)")


def log_report_failed(report_label: str, error: Exception) -> None:
    _log_error(f"Failed to load report {report_label}")
    _log_error(f"  Error: {error}")


def log_validation_result(result) -> None:
    """
    Log each count check and the overall verdict.

    Args:
        result: ValidationResult from the validator
    """
    for check in result.checks:
        message = f"{check.kind}: {check.actual} in store, {check.expected} expected"
        if check.passed:
            _log_debug(message)
        else:
            _log_error(f"Count mismatch for {message}")

    if result.passed:
        _log_success("Validation passed: store counts match the load totals")
    else:
        _log_warning(f"Validation failed: {len(result.mismatches)} count mismatch(es)")
