"""
Transcript ingestion through an LLM provider.

Alternate path to the HTML deck parser: free-form meeting notes go to a
provider that returns the same per-team JSON shape, which is converted into
a ParsedReport. The loader does not distinguish the two paths.
"""

from datetime import date
from typing import Optional

from statusdeck.contexts.ingest.exceptions import TranscriptParsingError
from statusdeck.contexts.ingest.logger import _log_info, _log_success
from statusdeck.contexts.ingest.report_data_structure import DEFAULT_RISK_SEVERITY, ParsedReport
from statusdeck.utils.llm import get_provider, parse_json_object

# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

_SYSTEM_PROMPT = """\
You are an expert at parsing status meeting transcripts into structured data.

Extract the following information for EACH team mentioned in the transcript:
- Team name
- Team lead name
- Accomplishments (completed last period), grouped by status such as "Ready for UAT", "UAT Pass", "In Production"
- Goals (worked on this period), grouped by status such as "In Progress", "In QA", "Ready for UAT"
- Blockers (issues blocking progress) and any workaround
- Risks (potential problems) with severity and any mitigation

Identify ticket ids where present (usually numbers like "89536").

Return a JSON object with this exact structure:
{
  "teams": [
    {
      "teamName": "Team Name",
      "teamLead": "Lead Name",
      "accomplishments": [{"section": "Ready for UAT", "description": "...", "ticketId": "12345"}],
      "goals": [{"section": "In Progress", "description": "...", "ticketId": null}],
      "blockers": [{"description": "...", "ticketId": null, "workaround": null}],
      "risks": [{"description": "...", "severity": "high", "mitigation": null}]
    }
  ]
}

Rules:
- Return ONLY the JSON object, no markdown formatting
- Use null for missing ticket ids, workarounds and mitigations
- Severity must be "low", "medium" or "high"
- Use an empty array for a category with no items"""

_USER_PROMPT_TEMPLATE = """\
Parse this status meeting transcript and extract all team updates:

{transcript}"""

# =============================================================================
# EXTRACTION
# =============================================================================


def build_transcript_prompt(transcript: str) -> str:
    return _USER_PROMPT_TEMPLATE.format(transcript=transcript.strip())


def default_report_title(period_end_date: date) -> str:
    """Title in the deck convention, so the date is recoverable from it."""
    return f"Status Report {period_end_date.strftime('%m.%d.%Y')}"


def report_from_response(
    response_text: str,
    period_end_date: date,
    title: Optional[str] = None,
    source: Optional[str] = None,
) -> ParsedReport:
    """
    Convert a provider response into a ParsedReport.

    Risks without a valid severity get DEFAULT_RISK_SEVERITY.

    Raises:
        TranscriptParsingError: If the response holds no JSON object or the
            object has no `teams` list
    """
    data = parse_json_object(response_text)
    if data is None:
        raise TranscriptParsingError("Provider response contains no JSON object", response_text)
    if not isinstance(data.get("teams"), list):
        raise TranscriptParsingError("Provider response has no 'teams' list", response_text)

    report = ParsedReport.from_dict(
        data,
        period_end_date=period_end_date,
        title=title or default_report_title(period_end_date),
        source=source,
    )
    for team in report.teams:
        for risk in team.risks:
            risk.severity = risk.severity or DEFAULT_RISK_SEVERITY
    return report


def parse_transcript(
    transcript: str,
    period_end_date: date,
    title: Optional[str] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    source: Optional[str] = None,
) -> ParsedReport:
    """
    Extract a report from meeting-notes text with an LLM.

    Args:
        transcript: Free-form meeting notes
        period_end_date: Period the report covers (not inferred from text)
        title: Report title (default: "Status Report MM.DD.YYYY")
        provider: "anthropic" or "openai" (default: LLM_PROVIDER env var)
        model: Model name (default: provider-specific default)
        source: Identifier for logs

    Returns:
        ParsedReport in the same shape the deck parser produces

    Raises:
        TranscriptParsingError: If the transcript is empty or the response
            is truncated or unusable
    """
    if not transcript or not transcript.strip():
        raise TranscriptParsingError("Transcript text is required")

    llm = get_provider(provider_name=provider, model=model)
    _log_info(f"Parsing transcript{f' {source}' if source else ''} with {llm.name}")

    response = llm.generate(
        system_prompt=_SYSTEM_PROMPT,
        user_prompt=build_transcript_prompt(transcript),
        json_output=True,
    )
    if response.truncated:
        raise TranscriptParsingError(
            f"Provider response was cut off at the token limit ({response.output_tokens} tokens)",
            response.content,
        )
    report = report_from_response(response.content, period_end_date, title=title, source=source)

    _log_success(
        f"Transcript parsed: {len(report.teams)} team(s) "
        f"({response.input_tokens} in / {response.output_tokens} out tokens)"
    )
    return report
