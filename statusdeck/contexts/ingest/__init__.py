"""
Ingest Context

Responsibilities:
- Parses status-report decks (HTML, one slide per team) into ParsedReport records
- Normalizes free-text items (list decoration, embedded ticket references)
- Runs batch parsing over a directory with per-document outcomes
- Accepts the same record shape from the transcript (LLM) ingestion path

Owns: Markup traversal, section matching, ticket extraction, parsed record model
Never: Writes to the store
"""

from statusdeck.contexts.ingest.batch_parser import (
    BatchParseResult,
    ParseOutcome,
    parse_report_directory,
)
from statusdeck.contexts.ingest.document_parser import parse_report_file, parse_report_html
from statusdeck.contexts.ingest.exceptions import ReportParsingError, TranscriptParsingError
from statusdeck.contexts.ingest.report_data_structure import ParsedItem, ParsedReport, ParsedTeam

__all__ = [
    # Parsing entry points
    "parse_report_html",
    "parse_report_file",
    "parse_report_directory",
    "BatchParseResult",
    "ParseOutcome",
    # Record model
    "ParsedReport",
    "ParsedTeam",
    "ParsedItem",
    # Errors
    "ReportParsingError",
    "TranscriptParsingError",
]
