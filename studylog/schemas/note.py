"""
Note schemas.

POST  /notes                 → NoteCreateRequest  → NoteCreateResponse
GET   /notes                 → NoteListResponse
GET   /notes/{id}/analysis   → NoteAnalysisResponse
PATCH /notes/{id}            → NoteUpdateRequest  → NoteOut
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

from pydantic import Field, field_validator

from studylog.schemas.common import CamelModel


class NoteCreateRequest(CamelModel):
    """A raw study note. Title is optional; a placeholder is used when absent."""

    title: Optional[str] = Field(
        default=None,
        max_length=256,
        description="Omit to let the analysis propose a title.",
        examples=["Goroutines vs threads"],
    )
    raw_content: Annotated[str, Field(
        min_length=1,
        description="Unpolished note text. Must not be blank.",
        examples=["Learned about mutexes today. Lock before touching shared state."],
    )]

    @field_validator("raw_content", mode="before")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        if isinstance(v, str) and not v.strip():
            raise ValueError("rawContent must not be empty")
        return v


class NoteCreateResponse(CamelModel):
    note_id: int
    status: Literal["ANALYZING"] = "ANALYZING"
    message: str
    raw_content: str


class NoteUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    refined_content: Optional[str] = None


class NoteOut(CamelModel):
    id: int
    user_id: int
    title: str
    raw_content: str
    refined_content: Optional[str] = None
    created_at: str


class NoteListResponse(CamelModel):
    total: int
    page: int
    page_size: int
    items: list[NoteOut]


class NoteAnalysisResponse(CamelModel):
    """
    ANALYZING → noteId, title, status, rawContent, message.
    COMPLETED → adds refinedContent and the five analysis payloads.
    Payload blobs are returned exactly as the analysis produced them.
    """

    note_id: int
    title: str
    status: Literal["ANALYZING", "COMPLETED"]
    raw_content: str
    message: Optional[str] = None
    refined_content: Optional[str] = None
    summary: Optional[Any] = None
    fact_checks: Optional[list[Any]] = None
    feedback: Optional[Any] = None
    skill_update_proposal: Optional[Any] = None
    suggested_todos: Optional[list[Any]] = None
