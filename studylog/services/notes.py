"""
Note Lifecycle Engine.

States
------
  CREATED    — transient, inside create_note before the row is committed
  ANALYZING  — Note persisted, no NoteAnalysis row yet
  COMPLETED  — NoteAnalysis row present

Enrichment failure is never surfaced: a failed note simply stays in
ANALYZING. The only transition, ANALYZING → COMPLETED, is made by
apply_enrichment() from the background task.

Public API
----------
create_note(db, dispatcher, owner_id, raw_content, title)  -> CreatedNote
get_analysis(db, note_id, owner_id)                        -> NoteAnalysisView
update_note(db, note_id, owner_id, title, refined_content) -> Note
delete_note(db, note_id, owner_id)                         -> str
list_notes(db, owner_id, page, page_size)                  -> tuple[int, list[Note]]
apply_enrichment(db, note_id, result, update_title)        -> bool
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studylog.core.errors import InvalidInputError, NoteNotFoundError
from studylog.models.learning_todo import LearningTodo
from studylog.models.note import Note, TITLE_MAX_LENGTH, UNTITLED_NOTE
from studylog.models.note_analysis import NoteAnalysis
from studylog.services.enrichment import EnrichmentResult

if TYPE_CHECKING:
    from studylog.services.dispatcher import EnrichmentDispatcher

logger = logging.getLogger(__name__)


class NoteStatus:
    ANALYZING = "ANALYZING"
    COMPLETED = "COMPLETED"


ANALYZING_MESSAGE = "Analysis is still in progress."
CREATED_MESSAGE = "Note saved. Analysis has started."
DELETED_MESSAGE = "Note and associated analysis deleted successfully"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class CreatedNote:
    note: Note
    status: str = NoteStatus.ANALYZING
    message: str = CREATED_MESSAGE


@dataclass
class NoteAnalysisView:
    note_id: int
    title: str
    status: str
    raw_content: str
    message: Optional[str] = None
    refined_content: Optional[str] = None
    summary: Any = None
    fact_checks: list[Any] = field(default_factory=list)
    feedback: Any = None
    skill_update_proposal: Any = None
    suggested_todos: Optional[list[Any]] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _owned_note(db: Session, note_id: int, owner_id: int) -> Optional[Note]:
    return (
        db.query(Note)
        .filter(Note.id == note_id, Note.user_id == owner_id)
        .first()
    )


def _analysis_for(db: Session, note_id: int) -> Optional[NoteAnalysis]:
    return db.query(NoteAnalysis).filter(NoteAnalysis.note_id == note_id).first()


# ---------------------------------------------------------------------------
# Public — create
# ---------------------------------------------------------------------------

def create_note(
    db: Session,
    dispatcher: "EnrichmentDispatcher",
    owner_id: int,
    raw_content: str,
    title: Optional[str] = None,
) -> CreatedNote:
    """
    Persist the note, then hand enrichment to the dispatcher without
    waiting for it. Returns as soon as the row is committed.
    """
    if not raw_content or not raw_content.strip():
        raise InvalidInputError(
            "Invalid note data: rawContent is required.",
            details={"field": "rawContent"},
        )

    clean_title = title.strip() if title else ""
    is_auto_title = not clean_title

    note = Note(
        user_id=owner_id,
        title=UNTITLED_NOTE if is_auto_title else clean_title,
        raw_content=raw_content,
    )
    db.add(note)
    db.commit()
    db.refresh(note)

    logger.info(
        "note_created",
        extra={"note_id": note.id, "owner_id": owner_id, "auto_title": is_auto_title},
    )
    try:
        dispatcher.submit(note.id, note.raw_content, update_title=is_auto_title)
    except RuntimeError:
        # Executor already shut down; the note is stored and stays ANALYZING.
        logger.exception("enrichment_dispatch_failed", extra={"note_id": note.id})
    return CreatedNote(note=note)


# ---------------------------------------------------------------------------
# Public — background transition (ANALYZING → COMPLETED)
# ---------------------------------------------------------------------------

def apply_enrichment(
    db: Session,
    note_id: int,
    result: EnrichmentResult,
    update_title: bool,
) -> bool:
    """
    Store the analysis row and refined content in one commit.
    Returns False (and writes nothing) if the note is gone or was
    already analyzed.
    """
    note = db.get(Note, note_id)
    if note is None:
        logger.warning("enrichment_note_missing", extra={"note_id": note_id})
        return False

    if _analysis_for(db, note_id) is not None:
        logger.warning("enrichment_already_applied", extra={"note_id": note_id})
        return False

    db.add(NoteAnalysis(
        note_id=note_id,
        summary_json=result.summary,
        skill_proposal_json=result.skill_update_proposal,
        feedback_json=result.feedback,
        suggested_todos_json=result.suggested_todos,
        fact_checks_json=result.fact_checks,
    ))
    note.refined_content = result.refined_note
    generated = (result.generated_title or "").strip()
    if update_title and generated:
        # Bounded by the column length.
        note.title = generated[:TITLE_MAX_LENGTH]

    db.commit()
    return True


# ---------------------------------------------------------------------------
# Public — poll
# ---------------------------------------------------------------------------

def get_analysis(db: Session, note_id: int, owner_id: int) -> NoteAnalysisView:
    """Side-effect free; safe to poll."""
    note = _owned_note(db, note_id, owner_id)
    if note is None:
        raise NoteNotFoundError(note_id)

    analysis = _analysis_for(db, note_id)
    if analysis is None:
        return NoteAnalysisView(
            note_id=note.id,
            title=note.title,
            status=NoteStatus.ANALYZING,
            raw_content=note.raw_content,
            message=ANALYZING_MESSAGE,
        )

    return NoteAnalysisView(
        note_id=note.id,
        title=note.title,
        status=NoteStatus.COMPLETED,
        raw_content=note.raw_content,
        refined_content=note.refined_content,
        summary=analysis.summary_json,
        fact_checks=analysis.fact_checks_json or [],
        feedback=analysis.feedback_json,
        skill_update_proposal=analysis.skill_proposal_json,
        suggested_todos=analysis.suggested_todos_json or [],
    )


# ---------------------------------------------------------------------------
# Public — update / delete / list
# ---------------------------------------------------------------------------

def update_note(
    db: Session,
    note_id: int,
    owner_id: int,
    title: Optional[str] = None,
    refined_content: Optional[str] = None,
) -> Note:
    """Partial update. Only title and refined content are editable."""
    if title is None and refined_content is None:
        raise InvalidInputError("No fields to update provided.")

    note = _owned_note(db, note_id, owner_id)
    if note is None:
        raise NoteNotFoundError(note_id)

    if title is not None:
        note.title = title
    if refined_content is not None:
        note.refined_content = refined_content
    db.commit()
    db.refresh(note)
    return note


def delete_note(db: Session, note_id: int, owner_id: int) -> str:
    """
    Idempotent: succeeds whether or not the note existed.
    Removing dependent analysis/todo rows is best-effort and never
    undoes the note deletion.
    """
    note = _owned_note(db, note_id, owner_id)
    if note is None:
        return DELETED_MESSAGE

    db.delete(note)
    db.commit()

    try:
        db.query(NoteAnalysis).filter(
            NoteAnalysis.note_id == note_id,
        ).delete(synchronize_session=False)
        db.query(LearningTodo).filter(
            LearningTodo.note_id == note_id,
            LearningTodo.user_id == owner_id,
        ).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("note_cascade_failed", exc_info=True, extra={"note_id": note_id})

    return DELETED_MESSAGE


def list_notes(
    db: Session,
    owner_id: int,
    page: int = 1,
    page_size: int = 5,
) -> tuple[int, list[Note]]:
    """Return (total, page) of the owner's notes, newest first."""
    q = db.query(Note).filter(Note.user_id == owner_id)
    total = q.count()
    items = (
        q.order_by(Note.created_at.desc(), Note.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return total, items
