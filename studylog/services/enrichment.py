"""
Enrichment provider adapter.

A single call, `enrich(raw_text) -> EnrichmentResult`, that either returns
a contract-valid result or raises UpstreamFailureError. Prompting and the
response schema are fixed contract data; the JSON blobs (summary,
feedback, skillUpdateProposal) are passed through without interpretation.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

import openai
from openai import OpenAI
from pydantic import BaseModel, ConfigDict, ValidationError

from studylog.core.config import Settings
from studylog.core.errors import UpstreamFailureError

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a senior developer mentor. Read the user's unpolished study note and:
1. Generate a title that best represents the note (generatedTitle)
2. Rewrite the learning content as clean Markdown (refinedNote)
3. Verify technically incorrect statements (factChecks)
4. Give feedback matched to the user's skill level (feedback)
5. Suggest actionable todos that point to the next step (suggestedTodos)
6. Propose a skill tree update (skillUpdateProposal)

Return JSON only.
Structure:
{
  "generatedTitle": "string",
  "refinedNote": "markdown string",
  "summary": { "keywords": [], "oneLineSummary": "" },
  "factChecks": [{ "originalText": "", "verdict": "TRUE|FALSE|PARTIALLY_TRUE", "comment": "", "correction": "" }],
  "feedback": { "type": "GOOD|BAD", "message": "", "longTermGoal": "", "shortTermGoal": "" },
  "skillUpdateProposal": { "category": "", "stack": "", "newSkills": [] },
  "suggestedTodos": [{ "content": "", "deadlineType": "SHORT_TERM|LONG_TERM", "reason": "" }]
}"""


# ---------------------------------------------------------------------------
# Contract models (validation only)
# ---------------------------------------------------------------------------

class _FactCheck(BaseModel):
    model_config = ConfigDict(extra="allow")

    originalText: str
    verdict: Literal["TRUE", "FALSE", "PARTIALLY_TRUE"]
    comment: Optional[str] = None
    correction: Optional[str] = None


class _SuggestedTodo(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str
    deadlineType: Optional[Literal["SHORT_TERM", "LONG_TERM"]] = None
    reason: Optional[str] = None


class _EnrichmentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    refinedNote: str
    summary: Optional[dict[str, Any]] = None
    factChecks: list[_FactCheck] = []
    feedback: Optional[dict[str, Any]] = None
    skillUpdateProposal: Optional[dict[str, Any]] = None
    suggestedTodos: list[_SuggestedTodo] = []
    generatedTitle: Optional[str] = None


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class EnrichmentResult:
    refined_note: str
    summary: Optional[dict[str, Any]] = None
    fact_checks: list[dict[str, Any]] = field(default_factory=list)
    feedback: Optional[dict[str, Any]] = None
    skill_update_proposal: Optional[dict[str, Any]] = None
    suggested_todos: list[dict[str, Any]] = field(default_factory=list)
    generated_title: Optional[str] = None


def parse_enrichment_payload(payload: Any) -> EnrichmentResult:
    """Validate a decoded provider response against the contract."""
    if not isinstance(payload, dict):
        raise UpstreamFailureError("Enrichment response is not a JSON object.")
    try:
        parsed = _EnrichmentPayload.model_validate(payload)
    except ValidationError as exc:
        raise UpstreamFailureError(
            "Enrichment response does not match the expected shape.",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc

    return EnrichmentResult(
        refined_note=parsed.refinedNote,
        summary=parsed.summary,
        fact_checks=[fc.model_dump(exclude_none=True) for fc in parsed.factChecks],
        feedback=parsed.feedback,
        skill_update_proposal=parsed.skillUpdateProposal,
        suggested_todos=[t.model_dump(exclude_none=True) for t in parsed.suggestedTodos],
        generated_title=parsed.generatedTitle or None,
    )


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class EnrichmentProvider(ABC):
    """Turns raw note text into an EnrichmentResult."""

    @abstractmethod
    def enrich(self, raw_text: str) -> EnrichmentResult:
        """Raise UpstreamFailureError on any failure."""
        ...


class OpenAIEnrichmentProvider(EnrichmentProvider):
    def __init__(self, api_key: Optional[str], model: str, timeout: float = 60.0):
        self.model = model
        # No key → no client; every call then fails as an upstream failure.
        self.client = OpenAI(api_key=api_key, timeout=timeout) if api_key else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIEnrichmentProvider":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            timeout=settings.OPENAI_TIMEOUT,
        )

    def enrich(self, raw_text: str) -> EnrichmentResult:
        if self.client is None:
            raise UpstreamFailureError("OpenAI API key is not configured.")

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": raw_text},
                ],
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as exc:
            raise UpstreamFailureError(f"OpenAI request failed: {exc}") from exc

        if not completion.choices:
            raise UpstreamFailureError("OpenAI returned no choices.")
        content = completion.choices[0].message.content
        if content is None:
            raise UpstreamFailureError("OpenAI returned empty content.")

        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise UpstreamFailureError("OpenAI returned invalid JSON.") from exc

        logger.debug("enrichment_response_received", extra={"model": self.model})
        return parse_enrichment_payload(payload)
