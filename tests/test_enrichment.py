"""
Tests for the enrichment provider adapter: payload validation and the
OpenAI provider's failure mapping. The OpenAI client is replaced with a
stub; no network calls are made.
"""
import json
from types import SimpleNamespace

import openai
import pytest

from studylog.core.config import Settings
from studylog.core.errors import UpstreamFailureError
from studylog.services.enrichment import (
    OpenAIEnrichmentProvider,
    SYSTEM_PROMPT,
    parse_enrichment_payload,
)

VALID_PAYLOAD = {
    "generatedTitle": "Understanding Mutexes",
    "refinedNote": "# Mutexes\n\nLock before touching shared state.",
    "summary": {"keywords": ["mutex"], "oneLineSummary": "Mutexes guard shared state."},
    "factChecks": [
        {"originalText": "Mutexes are free", "verdict": "FALSE", "correction": "Locking has a cost."}
    ],
    "feedback": {"type": "GOOD", "message": "Clear notes."},
    "skillUpdateProposal": {"category": "Concurrency", "stack": "Go", "newSkills": ["sync.Mutex"]},
    "suggestedTodos": [
        {"content": "Write a counter with sync.Mutex", "deadlineType": "SHORT_TERM", "reason": "practice"}
    ],
}


class _StubCompletions:
    def __init__(self, content=None, error=None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def provider_with(completions: _StubCompletions) -> OpenAIEnrichmentProvider:
    provider = OpenAIEnrichmentProvider(api_key=None, model="gpt-test")
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return provider


# ---------------------------------------------------------------------------
# parse_enrichment_payload
# ---------------------------------------------------------------------------

class TestParsePayload:
    def test_valid_payload(self):
        result = parse_enrichment_payload(VALID_PAYLOAD)
        assert result.refined_note.startswith("# Mutexes")
        assert result.generated_title == "Understanding Mutexes"
        assert result.summary == VALID_PAYLOAD["summary"]
        assert result.fact_checks[0]["verdict"] == "FALSE"
        assert result.suggested_todos[0]["deadlineType"] == "SHORT_TERM"
        assert result.skill_update_proposal["newSkills"] == ["sync.Mutex"]

    def test_only_refined_note_required(self):
        result = parse_enrichment_payload({"refinedNote": "text"})
        assert result.refined_note == "text"
        assert result.fact_checks == []
        assert result.suggested_todos == []
        assert result.generated_title is None

    def test_empty_generated_title_is_none(self):
        result = parse_enrichment_payload({"refinedNote": "text", "generatedTitle": ""})
        assert result.generated_title is None

    def test_missing_refined_note(self):
        payload = {k: v for k, v in VALID_PAYLOAD.items() if k != "refinedNote"}
        with pytest.raises(UpstreamFailureError) as exc_info:
            parse_enrichment_payload(payload)
        assert "errors" in exc_info.value.details

    def test_bad_verdict(self):
        payload = dict(VALID_PAYLOAD, factChecks=[{"originalText": "x", "verdict": "MAYBE"}])
        with pytest.raises(UpstreamFailureError):
            parse_enrichment_payload(payload)

    def test_bad_deadline_type(self):
        payload = dict(VALID_PAYLOAD, suggestedTodos=[{"content": "x", "deadlineType": "SOMEDAY"}])
        with pytest.raises(UpstreamFailureError):
            parse_enrichment_payload(payload)

    def test_not_an_object(self):
        with pytest.raises(UpstreamFailureError):
            parse_enrichment_payload(["refinedNote"])

    def test_extra_fact_check_keys_passed_through(self):
        payload = dict(
            VALID_PAYLOAD,
            factChecks=[{"originalText": "x", "verdict": "TRUE", "source": "docs"}],
        )
        result = parse_enrichment_payload(payload)
        assert result.fact_checks[0]["source"] == "docs"


# ---------------------------------------------------------------------------
# OpenAIEnrichmentProvider
# ---------------------------------------------------------------------------

class TestOpenAIProvider:
    def test_no_api_key_raises_upstream_failure(self):
        provider = OpenAIEnrichmentProvider(api_key=None, model="gpt-test")
        assert provider.client is None
        with pytest.raises(UpstreamFailureError):
            provider.enrich("Learned about mutexes")

    def test_from_settings(self):
        s = Settings(OPENAI_API_KEY=None, OPENAI_MODEL="gpt-custom")
        provider = OpenAIEnrichmentProvider.from_settings(s)
        assert provider.model == "gpt-custom"
        assert provider.client is None

    def test_success(self):
        completions = _StubCompletions(content=json.dumps(VALID_PAYLOAD))
        result = provider_with(completions).enrich("Learned about mutexes")
        assert result.generated_title == "Understanding Mutexes"

        call = completions.calls[0]
        assert call["model"] == "gpt-test"
        assert call["response_format"] == {"type": "json_object"}
        assert call["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert call["messages"][1] == {"role": "user", "content": "Learned about mutexes"}

    def test_client_error_mapped(self):
        completions = _StubCompletions(error=openai.OpenAIError("connection reset"))
        with pytest.raises(UpstreamFailureError) as exc_info:
            provider_with(completions).enrich("x")
        assert "connection reset" in exc_info.value.message

    def test_no_choices(self):
        with pytest.raises(UpstreamFailureError):
            provider_with(_StubCompletions(choices=False)).enrich("x")

    def test_empty_content(self):
        with pytest.raises(UpstreamFailureError):
            provider_with(_StubCompletions(content=None)).enrich("x")

    def test_invalid_json(self):
        with pytest.raises(UpstreamFailureError):
            provider_with(_StubCompletions(content="{not json")).enrich("x")

    def test_contract_violation(self):
        content = json.dumps({"summary": {}})
        with pytest.raises(UpstreamFailureError):
            provider_with(_StubCompletions(content=content)).enrich("x")
