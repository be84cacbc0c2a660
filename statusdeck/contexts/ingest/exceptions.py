"""Custom exceptions for the ingest context."""

from typing import Optional

from statusdeck.utils.text_processing import truncate


class ReportParsingError(Exception):
    """
    Raised when a report document cannot be parsed at all.

    Structural absence (a missing section box, heading or lead) is never an
    error; this is reserved for input the parser cannot recover from.

    Attributes:
        message: Error description
        source: File name or identifier of the document
        snippet: Offending input fragment, truncated for display
    """

    def __init__(self, message: str, source: Optional[str] = None, snippet: Optional[str] = None):
        self.message = message
        self.source = source
        self.snippet = snippet

        parts = [message]
        if source:
            parts.append(f"Source: {source}")
        if snippet:
            parts.append(f"Input:\n{truncate(snippet)}")

        super().__init__("\n".join(parts))


class TranscriptParsingError(ValueError):
    """
    Raised when the transcript ingestion path produces no usable report.

    Covers empty transcripts, provider responses cut off at the token limit,
    responses that contain no JSON object, and JSON whose `teams` field is
    missing or not a list.
    """

    def __init__(self, message: str, response_text: Optional[str] = None):
        self.message = message
        self.response_text = response_text
        if response_text:
            message = f"{message}\nResponse:\n{truncate(response_text)}"
        super().__init__(message)
