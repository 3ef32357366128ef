"""
Learning todo schemas.

POST  /notes/{id}/todos       → SaveTodosRequest  → list[TodoOut]
POST  /dashboard/todos        → TodoCreateRequest → TodoOut
PATCH /dashboard/todos/{id}   → TodoUpdateRequest → TodoOut
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import Field

from studylog.models.learning_todo import DeadlineType, TodoStatus
from studylog.schemas.common import CamelModel


class TodoItemIn(CamelModel):
    content: Annotated[str, Field(min_length=1, examples=["Practice sync.Mutex with a counter"])]
    reason: Optional[str] = Field(default=None, examples=["Identified as a gap in current knowledge"])
    due_date: Optional[date] = Field(default=None, examples=["2026-11-01"])
    deadline_type: Optional[DeadlineType] = None


class SaveTodosRequest(CamelModel):
    todos: list[TodoItemIn] = Field(
        default_factory=list,
        description="Suggested todos the user accepted. Duplicates of existing todos are skipped.",
    )


class TodoCreateRequest(TodoItemIn):
    note_id: Optional[int] = Field(
        default=None,
        description="Link the todo to one of your notes. Omit for a manual todo.",
    )


class TodoUpdateRequest(CamelModel):
    content: Optional[str] = Field(default=None, min_length=1)
    due_date: Optional[date] = None
    status: Optional[TodoStatus] = None
    reason: Optional[str] = None
    deadline_type: Optional[DeadlineType] = None


class TodoOut(CamelModel):
    id: int
    note_id: Optional[int] = None
    user_id: int
    content: str
    due_date: Optional[str] = None
    status: TodoStatus
    reason: Optional[str] = None
    deadline_type: Optional[DeadlineType] = None
    created_at: str
    is_checked: bool
