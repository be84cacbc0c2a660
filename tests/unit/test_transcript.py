"""Unit tests for transcript ingestion with a fake LLM provider."""

import json
from datetime import date

import pytest

from statusdeck.contexts.ingest import transcript as transcript_module
from statusdeck.contexts.ingest.exceptions import TranscriptParsingError
from statusdeck.contexts.ingest.transcript import parse_transcript, report_from_response
from statusdeck.utils.llm import LLMResponse

RESPONSE = {
    "teams": [
        {
            "teamName": "Platform",
            "teamLead": "Dana Whitfield",
            "accomplishments": [
                {"section": "Ready for UAT", "description": "Fix login redirect", "ticketId": "89536"}
            ],
            "goals": [],
            "blockers": [{"description": "Waiting for API keys", "ticketId": None}],
            "risks": [
                {"description": "Downtime during migration", "severity": "high"},
                {"description": "Vendor delay"},
            ],
        }
    ]
}


class FakeProvider:
    """Records prompts and returns a canned response."""

    name = "fake/model"

    def __init__(self, content: str, truncated: bool = False):
        self.content = content
        self.truncated = truncated
        self.prompts = []
        self.json_output = None

    def generate(self, system_prompt: str, user_prompt: str, json_output: bool = False) -> LLMResponse:
        self.prompts.append((system_prompt, user_prompt))
        self.json_output = json_output
        return LLMResponse(
            content=self.content,
            model="model",
            input_tokens=10,
            output_tokens=20,
            truncated=self.truncated,
        )


@pytest.fixture
def fake_provider(monkeypatch):
    """Install a FakeProvider returning RESPONSE wrapped in a markdown fence."""
    provider = FakeProvider(f"```json\n{json.dumps(RESPONSE)}\n```")
    monkeypatch.setattr(transcript_module, "get_provider", lambda provider_name=None, model=None: provider)
    return provider


@pytest.mark.unit
def test_parse_transcript(fake_provider):
    """Provider JSON becomes a ParsedReport with default title and severities."""
    report = parse_transcript("Platform: Dana says login fix is ready.", date(2025, 11, 24))

    assert report.period_end_date == date(2025, 11, 24)
    assert report.title == "Status Report 11.24.2025"
    assert [team.name for team in report.teams] == ["Platform"]

    team = report.teams[0]
    assert team.accomplishments[0].ticket_id == "89536"
    assert [risk.severity for risk in team.risks] == ["high", "medium"]

    _, user_prompt = fake_provider.prompts[0]
    assert "login fix is ready" in user_prompt
    assert fake_provider.json_output is True


@pytest.mark.unit
def test_parse_transcript_empty_text(fake_provider):
    with pytest.raises(TranscriptParsingError):
        parse_transcript("   ", date(2025, 11, 24))
    assert fake_provider.prompts == []


@pytest.mark.unit
def test_response_without_json():
    with pytest.raises(TranscriptParsingError) as exc_info:
        report_from_response("Sorry, I could not find any teams.", date(2025, 11, 24))
    assert "could not find" in str(exc_info.value)


@pytest.mark.unit
def test_response_without_teams_list():
    with pytest.raises(TranscriptParsingError):
        report_from_response('{"teams": {"name": "Platform"}}', date(2025, 11, 24))


@pytest.mark.unit
def test_response_with_surrounding_prose():
    text = f"Here is the data:\n{json.dumps(RESPONSE)}\nLet me know if you need more."
    report = report_from_response(text, date(2025, 11, 24), title="Custom")

    assert report.title == "Custom"
    assert report.teams[0].lead == "Dana Whitfield"


@pytest.mark.unit
def test_truncated_response_is_rejected(monkeypatch):
    """A reply cut off at the token limit is an error even if a prefix parses."""
    provider = FakeProvider(json.dumps({"teams": []}), truncated=True)
    monkeypatch.setattr(transcript_module, "get_provider", lambda provider_name=None, model=None: provider)

    with pytest.raises(TranscriptParsingError, match="token limit"):
        parse_transcript("Platform: all good.", date(2025, 11, 24))
