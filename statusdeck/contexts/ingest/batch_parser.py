"""
Batch parsing of a directory of report documents.

Each document is parsed independently; a failure is recorded as a failed
outcome and never stops the batch. Nothing here touches the store.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from statusdeck.contexts.ingest.document_parser import parse_report_file
from statusdeck.contexts.ingest.logger import log_batch_start, log_batch_summary, log_parse_result
from statusdeck.contexts.ingest.report_data_structure import ParsedReport
from statusdeck.contexts.ingest.section_config import SectionConfig

load_dotenv()
REPORTS_PATH = Path(os.getenv("REPORTS_PATH", "weeks"))
REPORT_FILE_EXTENSION = os.getenv("REPORT_FILE_EXTENSION", ".html")


@dataclass
class ParseOutcome:
    """Result of parsing one document."""

    file_name: str
    success: bool
    report: Optional[ParsedReport] = None
    error: Optional[str] = None


@dataclass
class BatchParseResult:
    """Per-document outcomes in processing (file name) order."""

    outcomes: List[ParseOutcome] = field(default_factory=list)

    @property
    def successful(self) -> List[ParseOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> List[ParseOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def reports(self) -> List[ParsedReport]:
        """Parsed reports of all successful outcomes, in order."""
        return [outcome.report for outcome in self.successful]


def list_report_files(directory: Path, extension: str = REPORT_FILE_EXTENSION) -> List[Path]:
    """
    List report documents in a directory, sorted by file name.

    Raises:
        FileNotFoundError: If directory doesn't exist or is not a directory
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Report directory not found: {directory}")

    extension = extension if extension.startswith(".") else f".{extension}"
    return sorted(
        (path for path in directory.iterdir() if path.is_file() and path.suffix == extension),
        key=lambda path: path.name,
    )


def parse_report_directory(
    directory: Path = REPORTS_PATH,
    extension: str = REPORT_FILE_EXTENSION,
    strict_dates: bool = False,
    config: Optional[SectionConfig] = None,
) -> BatchParseResult:
    """
    Parse every report document in a directory.

    Args:
        directory: Directory of report documents
        extension: Document file extension (default: REPORT_FILE_EXTENSION)
        strict_dates: Fail documents whose title has no usable date
        config: Section definitions (defaults to the packaged sections.yaml)

    Returns:
        BatchParseResult with one outcome per document

    Raises:
        FileNotFoundError: If the directory doesn't exist
    """
    files = list_report_files(directory, extension)
    log_batch_start(Path(directory), len(files))

    result = BatchParseResult()
    for path in files:
        try:
            report = parse_report_file(path, strict_dates=strict_dates, config=config)
            outcome = ParseOutcome(file_name=path.name, success=True, report=report)
        except Exception as e:
            outcome = ParseOutcome(file_name=path.name, success=False, error=str(e))

        log_parse_result(path.name, outcome)
        result.outcomes.append(outcome)

    log_batch_summary(result)
    return result
