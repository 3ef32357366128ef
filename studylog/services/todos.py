"""
Learning todos: reconciliation of suggested items plus plain CRUD.

Reconciliation rule: a proposed todo is dropped when its content exactly
matches one of the owner's existing todos (or an earlier item in the same
request). No fuzzy matching. Survivors are stored PENDING with
is_checked=True; hand-written todos get is_checked=False.

Public API
----------
select_new_todos(proposed, existing_contents)        -> list[ProposedTodo]   (pure)
reconcile_todos(db, owner_id, note_id, proposed)     -> list[LearningTodo]
create_todo(db, owner_id, item, note_id)             -> LearningTodo
list_todos(db, owner_id)                             -> list[LearningTodo]
update_todo(db, owner_id, todo_id, changes)          -> LearningTodo
delete_todo(db, owner_id, todo_id)                   -> str
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from studylog.core.errors import NoteNotFoundError, TodoNotFoundError
from studylog.models.learning_todo import LearningTodo, TodoStatus
from studylog.models.note import Note

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Todo deleted successfully"

_EDITABLE_FIELDS = ("content", "due_date", "status", "reason", "deadline_type")
# Cannot be cleared; an explicit null is ignored.
_REQUIRED_FIELDS = ("content", "status")


@dataclass
class ProposedTodo:
    """Lightweight DTO so the service layer stays schema-agnostic."""
    content: str
    reason: Optional[str] = None
    due_date: Optional[date] = None
    deadline_type: Optional[str] = None


# ---------------------------------------------------------------------------
# Pure — dedupe
# ---------------------------------------------------------------------------

def select_new_todos(
    proposed: Iterable[ProposedTodo],
    existing_contents: Iterable[str],
) -> list[ProposedTodo]:
    """Set-difference on exact content, preserving input order."""
    seen = set(existing_contents)
    fresh: list[ProposedTodo] = []
    for item in proposed:
        if item.content in seen:
            continue
        seen.add(item.content)
        fresh.append(item)
    return fresh


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_owned_note(db: Session, note_id: int, owner_id: int) -> None:
    exists = (
        db.query(Note.id)
        .filter(Note.id == note_id, Note.user_id == owner_id)
        .first()
    )
    if exists is None:
        raise NoteNotFoundError(note_id)


def _owned_todo(db: Session, todo_id: int, owner_id: int) -> Optional[LearningTodo]:
    return (
        db.query(LearningTodo)
        .filter(LearningTodo.id == todo_id, LearningTodo.user_id == owner_id)
        .first()
    )


# ---------------------------------------------------------------------------
# Public — reconciliation
# ---------------------------------------------------------------------------

def reconcile_todos(
    db: Session,
    owner_id: int,
    note_id: int,
    proposed: list[ProposedTodo],
) -> list[LearningTodo]:
    """
    Persist the proposed todos that the owner does not already have.
    Returns only the newly inserted rows (possibly empty).
    """
    _require_owned_note(db, note_id, owner_id)
    if not proposed:
        return []

    existing = [
        row.content
        for row in db.query(LearningTodo.content).filter(LearningTodo.user_id == owner_id).all()
    ]
    fresh = select_new_todos(proposed, existing)
    if not fresh:
        return []

    todos = [
        LearningTodo(
            note_id=note_id,
            user_id=owner_id,
            content=item.content,
            reason=item.reason,
            due_date=item.due_date,
            deadline_type=item.deadline_type,
            status=TodoStatus.PENDING,
            is_checked=True,
        )
        for item in fresh
    ]
    db.add_all(todos)
    db.commit()
    for todo in todos:
        db.refresh(todo)

    logger.info(
        "todos_reconciled",
        extra={
            "note_id": note_id,
            "proposed": len(proposed),
            "inserted": len(todos),
        },
    )
    return todos


# ---------------------------------------------------------------------------
# Public — CRUD
# ---------------------------------------------------------------------------

def create_todo(
    db: Session,
    owner_id: int,
    item: ProposedTodo,
    note_id: Optional[int] = None,
) -> LearningTodo:
    """Manual todo. A linked note must belong to the same owner."""
    if note_id is not None:
        _require_owned_note(db, note_id, owner_id)

    todo = LearningTodo(
        note_id=note_id,
        user_id=owner_id,
        content=item.content,
        reason=item.reason,
        due_date=item.due_date,
        deadline_type=item.deadline_type,
        status=TodoStatus.PENDING,
        is_checked=False,
    )
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo


def list_todos(db: Session, owner_id: int) -> list[LearningTodo]:
    return (
        db.query(LearningTodo)
        .filter(LearningTodo.user_id == owner_id)
        .order_by(LearningTodo.created_at.desc(), LearningTodo.id.desc())
        .all()
    )


def update_todo(
    db: Session,
    owner_id: int,
    todo_id: int,
    changes: dict[str, Any],
) -> LearningTodo:
    """Partial update; an empty change set returns the current row."""
    todo = _owned_todo(db, todo_id, owner_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)

    updates = {
        k: v for k, v in changes.items()
        if k in _EDITABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    if not updates:
        return todo

    for name, value in updates.items():
        setattr(todo, name, value)
    db.commit()
    db.refresh(todo)
    return todo


def delete_todo(db: Session, owner_id: int, todo_id: int) -> str:
    """Idempotent; deleting a missing todo still confirms."""
    db.query(LearningTodo).filter(
        LearningTodo.id == todo_id,
        LearningTodo.user_id == owner_id,
    ).delete(synchronize_session=False)
    db.commit()
    return DELETED_MESSAGE
