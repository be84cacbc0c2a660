"""
Session logging for statusdeck runs.

Each CLI run (migration, store audit, transcript parse) gets its own
timestamped directory under LOGS_PATH holding one `<context>.log` file. The
file receives everything down to DEBUG (every team parsed, every reference
resolved); the console shows INFO and above. Each log opens with a
provenance header recording how the run was invoked and which report
directory, store and section config it used, so a store can be traced back
to the run that loaded it.

Context-specific prefixed wrappers live in contexts/{context}/logger.py.
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv
from loguru import logger

from statusdeck.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
CONSOLE_LOG_LEVEL = os.getenv("STATUSDECK_LOG_LEVEL", "INFO").upper()

# Environment settings echoed into every provenance header
PROVENANCE_ENV_VARS = (
    "REPORTS_PATH",
    "REPORT_DB_PATH",
    "REPORT_FILE_EXTENSION",
    "SECTION_CONFIG_PATH",
    "LLM_PROVIDER",
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"
HEADER_RULE = "=" * 80


def session_log_dir(session_name: str, logs_root: Optional[Path] = None) -> Path:
    """
    Build a timestamped directory path for one logging session.

    Args:
        session_name: Short session label (e.g., "migrate", "transcript")
        logs_root: Root logs directory (default: LOGS_PATH from environment)

    Returns:
        Path like outs/logs/migrate_20251124_101500 (not created)
    """
    root = logs_root if logs_root is not None else LOGS_PATH
    return root / f"{session_name}_{now().strftime('%Y%m%d_%H%M%S')}"


def provenance_entries(extra: Optional[Dict[str, str]] = None) -> List[Tuple[str, str]]:
    """
    Key/value pairs for the provenance header.

    Invocation details first, then any PROVENANCE_ENV_VARS that are set,
    then the caller's extras (e.g., the store path of this run).
    """
    entries = [
        ("Command", " ".join(sys.argv)),
        ("Working directory", str(Path.cwd())),
        ("Python", sys.version.split()[0]),
        ("Started", now().isoformat()),
    ]
    entries += [(name, os.environ[name]) for name in PROVENANCE_ENV_VARS if os.environ.get(name)]
    entries += [(key, str(value)) for key, value in (extra or {}).items()]
    return entries


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, str]] = None,
    console_level: str = CONSOLE_LOG_LEVEL,
) -> Path:
    """
    Route loguru output to a session log file and the console.

    Replaces any previously installed sinks, so calling it again starts a
    fresh session.

    Args:
        context_name: Log file stem ("ingest" or "store")
        log_dir: Directory for this session (created if missing)
        extra_provenance: Additional header entries
        console_level: Minimum console level (default: STATUSDECK_LOG_LEVEL or INFO)

    Returns:
        Path to the log file

    Example:
        log_file = setup_logger(
            "store",
            session_log_dir("migrate"),
            extra_provenance={"Database": "data/statusdeck.db"},
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    logger.info(HEADER_RULE)
    for key, value in provenance_entries(extra_provenance):
        logger.info(f"{key}: {value}")
    logger.info(HEADER_RULE)

    return log_file
