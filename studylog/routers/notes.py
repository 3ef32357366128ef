"""
Notes router.

POST   /notes                 — create a note, start analysis in the background
GET    /notes                 — list the caller's notes (paginated, newest first)
GET    /notes/{id}/analysis   — poll analysis status / result
PATCH  /notes/{id}            — edit title and/or refined content
DELETE /notes/{id}            — delete note (+ analysis and todos, best-effort)
POST   /notes/{id}/todos      — save suggested todos, skipping duplicates
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from studylog.core.security import get_current_user_id
from studylog.db.base import get_db
from studylog.models.note import Note
from studylog.schemas.common import ErrorResponse, MessageResponse
from studylog.schemas.note import (
    NoteAnalysisResponse,
    NoteCreateRequest,
    NoteCreateResponse,
    NoteListResponse,
    NoteOut,
    NoteUpdateRequest,
)
from studylog.schemas.todo import SaveTodosRequest, TodoOut
from studylog.routers.todos import todo_to_response
from studylog.services.dispatcher import EnrichmentDispatcher, get_dispatcher
from studylog.services.notes import (
    NoteAnalysisView,
    create_note,
    delete_note,
    get_analysis,
    list_notes,
    update_note,
)
from studylog.services.todos import ProposedTodo, reconcile_todos

router = APIRouter(prefix="/notes", tags=["notes"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def note_to_response(note: Note) -> NoteOut:
    return NoteOut(
        id=note.id,
        user_id=note.user_id,
        title=note.title,
        raw_content=note.raw_content,
        refined_content=note.refined_content,
        created_at=note.created_at.isoformat() if note.created_at else "",
    )


def _analysis_to_response(view: NoteAnalysisView) -> NoteAnalysisResponse:
    return NoteAnalysisResponse(
        note_id=view.note_id,
        title=view.title,
        status=view.status,
        raw_content=view.raw_content,
        message=view.message,
        refined_content=view.refined_content,
        summary=view.summary,
        fact_checks=view.fact_checks if view.status == "COMPLETED" else None,
        feedback=view.feedback,
        skill_update_proposal=view.skill_update_proposal,
        suggested_todos=view.suggested_todos,
    )


# ---------------------------------------------------------------------------
# POST /notes
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=NoteCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note and start analysis",
    responses={
        201: {"description": "Note stored; analysis runs in the background."},
        422: {"model": ErrorResponse, "description": "Validation error (blank rawContent, etc.)"},
    },
)
def create(
    payload: NoteCreateRequest,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    dispatcher: EnrichmentDispatcher = Depends(get_dispatcher),
):
    """
    Store the raw note and return immediately with status `ANALYZING`.

    Analysis happens in the background. Poll `GET /notes/{id}/analysis`
    until the status becomes `COMPLETED`. A failed analysis is not
    reported; the note simply stays in `ANALYZING`.
    """
    created = create_note(
        db=db,
        dispatcher=dispatcher,
        owner_id=owner_id,
        raw_content=payload.raw_content,
        title=payload.title,
    )
    return NoteCreateResponse(
        note_id=created.note.id,
        status=created.status,
        message=created.message,
        raw_content=created.note.raw_content,
    )


# ---------------------------------------------------------------------------
# GET /notes
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=NoteListResponse,
    summary="List notes (newest first)",
)
def list_(
    page: int = Query(default=1, ge=1, description="1-based page number."),
    page_size: int = Query(default=5, ge=1, le=100, alias="pageSize", description="Page size."),
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    total, items = list_notes(db=db, owner_id=owner_id, page=page, page_size=page_size)
    return NoteListResponse(
        total=total,
        page=page,
        page_size=page_size,
        items=[note_to_response(n) for n in items],
    )


# ---------------------------------------------------------------------------
# GET /notes/{id}/analysis
# ---------------------------------------------------------------------------

@router.get(
    "/{note_id}/analysis",
    response_model=NoteAnalysisResponse,
    response_model_exclude_none=True,
    summary="Get analysis result for a note",
    responses={
        200: {"description": "ANALYZING (no payload yet) or COMPLETED with payload."},
        404: {"model": ErrorResponse, "description": "Note not found for this user."},
    },
)
def analysis(
    note_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Safe to poll: reads persisted state only."""
    view = get_analysis(db=db, note_id=note_id, owner_id=owner_id)
    return _analysis_to_response(view)


# ---------------------------------------------------------------------------
# PATCH /notes/{id}
# ---------------------------------------------------------------------------

@router.patch(
    "/{note_id}",
    response_model=NoteOut,
    summary="Update note title and/or refined content",
    responses={
        400: {"model": ErrorResponse, "description": "No updatable field provided."},
        404: {"model": ErrorResponse, "description": "Note not found for this user."},
    },
)
def update(
    note_id: int,
    payload: NoteUpdateRequest,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    note = update_note(
        db=db,
        note_id=note_id,
        owner_id=owner_id,
        title=payload.title,
        refined_content=payload.refined_content,
    )
    return note_to_response(note)


# ---------------------------------------------------------------------------
# DELETE /notes/{id}
# ---------------------------------------------------------------------------

@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    summary="Delete a note",
)
def delete(
    note_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Idempotent: deleting a missing note still returns a confirmation."""
    return MessageResponse(message=delete_note(db=db, note_id=note_id, owner_id=owner_id))


# ---------------------------------------------------------------------------
# POST /notes/{id}/todos
# ---------------------------------------------------------------------------

@router.post(
    "/{note_id}/todos",
    response_model=list[TodoOut],
    status_code=status.HTTP_201_CREATED,
    summary="Save suggested todos for a note",
    responses={
        201: {"description": "Newly inserted todos (empty if all were duplicates)."},
        404: {"model": ErrorResponse, "description": "Note not found for this user."},
    },
)
def save_todos(
    note_id: int,
    payload: SaveTodosRequest,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Insert the accepted todos, skipping any whose content already exists
    among the caller's todos (exact match).
    """
    proposed = [
        ProposedTodo(
            content=t.content,
            reason=t.reason,
            due_date=t.due_date,
            deadline_type=t.deadline_type,
        )
        for t in payload.todos
    ]
    todos = reconcile_todos(db=db, owner_id=owner_id, note_id=note_id, proposed=proposed)
    return [todo_to_response(t) for t in todos]
