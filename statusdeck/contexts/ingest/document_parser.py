"""
Report document parsing for the Ingest context.

A report document is an HTML slide deck: a <title> carrying the period-end
date as MM.DD.YYYY, an optional cover slide, then one `.slide` per team.
"""

import re
from datetime import date
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, UnicodeDammit

from statusdeck.contexts.ingest.exceptions import ReportParsingError
from statusdeck.contexts.ingest.logger import _log_debug, _log_warning
from statusdeck.contexts.ingest.patterns import DeckSelectors, TextRegex
from statusdeck.contexts.ingest.report_data_structure import ParsedReport
from statusdeck.contexts.ingest.section_config import SectionConfig, get_section_config
from statusdeck.contexts.ingest.slide_parser import parse_slide
from statusdeck.utils.timestamp import format_date, today

HTML_PARSER = "html.parser"

# Decks are exported as UTF-8; anything else is sniffed by UnicodeDammit
REPORT_ENCODINGS = ["utf-8"]


def extract_period_end_date(title: str) -> Optional[date]:
    """
    Extract the period-end date from document title text.

    Args:
        title: Title text (e.g., "Weekly Status 11.24.2025")

    Returns:
        The first MM.DD.YYYY match that is a real calendar date, or None

    Example:
        >>> extract_period_end_date("Build 13.45.2025 - Status 11.24.2025")
        datetime.date(2025, 11, 24)
    """
    for match in re.finditer(TextRegex.PERIOD_END_DATE, title):
        month, day, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return None


def parse_report_html(
    html: str,
    source: Optional[str] = None,
    strict_dates: bool = False,
    config: Optional[SectionConfig] = None,
) -> ParsedReport:
    """
    Parse one report document.

    Missing structure (no slides, no sections, no lead) is not an error and
    yields empty fields. A title without a usable date falls back to today's
    date unless strict_dates is set.

    Args:
        html: Document markup
        source: File name or identifier, used in logs and errors
        strict_dates: Raise instead of falling back to today's date
        config: Section definitions (defaults to the packaged sections.yaml)

    Returns:
        ParsedReport with teams in document order

    Raises:
        ReportParsingError: If the input is empty or contains no markup, or
            (with strict_dates) the title has no usable date
    """
    label = source or "<string>"

    if not html or not html.strip():
        raise ReportParsingError("Document is empty", source=source)

    soup = BeautifulSoup(html, HTML_PARSER)
    if soup.find() is None:
        raise ReportParsingError("Document contains no markup", source=source, snippet=html)

    title_node = soup.find("title")
    title = title_node.get_text().strip() if title_node else ""

    period_end_date = extract_period_end_date(title)
    if period_end_date is None:
        if strict_dates:
            raise ReportParsingError(
                "No MM.DD.YYYY period-end date in document title", source=source, snippet=title
            )
        period_end_date = today()
        _log_warning(
            f"{label}: no period-end date in title '{title}', "
            f"falling back to {format_date(period_end_date)}"
        )

    config = config or get_section_config()
    report = ParsedReport(period_end_date=period_end_date, title=title, source=source)

    for slide in soup.select(DeckSelectors.SLIDE):
        team = parse_slide(slide, config)
        if team is not None:
            report.teams.append(team)

    _log_debug(f"{label}: {format_date(period_end_date)}, {len(report.teams)} team(s)")
    return report


def parse_report_file(
    path: Path, strict_dates: bool = False, config: Optional[SectionConfig] = None
) -> ParsedReport:
    """
    Read and parse one report document from disk.

    Bytes that are not valid UTF-8 do not fail the document: the encoding is
    detected (e.g. a cp1252 export) and undecodable bytes become U+FFFD.

    Raises:
        ReportParsingError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ReportParsingError(f"Cannot read report file: {e}", source=path.name)

    return parse_report_html(
        decode_report_bytes(raw, source=path.name),
        source=path.name,
        strict_dates=strict_dates,
        config=config,
    )


def decode_report_bytes(raw: bytes, source: Optional[str] = None) -> str:
    """Decode document bytes, preferring UTF-8. Never raises."""
    label = source or "<bytes>"
    dammit = UnicodeDammit(raw, known_definite_encodings=REPORT_ENCODINGS, is_html=True)

    if dammit.unicode_markup is None:
        _log_warning(f"{label}: encoding not detected, replacing invalid UTF-8 bytes")
        return raw.decode("utf-8", errors="replace")

    encoding = (dammit.original_encoding or "utf-8").lower()
    if encoding not in ("utf-8", "ascii"):
        _log_warning(f"{label}: not valid UTF-8, decoded as {encoding}")
    return dammit.unicode_markup
