"""
Learning todos router (mounted under /dashboard).

GET    /dashboard/todos        — list the caller's todos (newest first)
POST   /dashboard/todos        — create a manual todo
PATCH  /dashboard/todos/{id}   — partial update
DELETE /dashboard/todos/{id}   — delete (idempotent)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from studylog.core.security import get_current_user_id
from studylog.db.base import get_db
from studylog.models.learning_todo import LearningTodo
from studylog.schemas.common import ErrorResponse, MessageResponse
from studylog.schemas.todo import TodoCreateRequest, TodoOut, TodoUpdateRequest
from studylog.services.todos import (
    ProposedTodo,
    create_todo,
    delete_todo,
    list_todos,
    update_todo,
)

router = APIRouter(prefix="/dashboard/todos", tags=["todos"])


def todo_to_response(todo: LearningTodo) -> TodoOut:
    return TodoOut(
        id=todo.id,
        note_id=todo.note_id,
        user_id=todo.user_id,
        content=todo.content,
        due_date=str(todo.due_date) if todo.due_date else None,
        status=todo.status,
        reason=todo.reason,
        deadline_type=todo.deadline_type,
        created_at=todo.created_at.isoformat() if todo.created_at else "",
        is_checked=todo.is_checked,
    )


@router.get("", response_model=list[TodoOut], summary="List todos (newest first)")
def list_(
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [todo_to_response(t) for t in list_todos(db=db, owner_id=owner_id)]


@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a todo",
    responses={404: {"model": ErrorResponse, "description": "noteId given but not one of your notes."}},
)
def create(
    payload: TodoCreateRequest,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    item = ProposedTodo(
        content=payload.content,
        reason=payload.reason,
        due_date=payload.due_date,
        deadline_type=payload.deadline_type,
    )
    todo = create_todo(db=db, owner_id=owner_id, item=item, note_id=payload.note_id)
    return todo_to_response(todo)


@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update a todo",
    responses={404: {"model": ErrorResponse, "description": "Todo not found for this user."}},
)
def update(
    todo_id: int,
    payload: TodoUpdateRequest,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body are changed."""
    changes = payload.model_dump(exclude_unset=True)
    todo = update_todo(db=db, owner_id=owner_id, todo_id=todo_id, changes=changes)
    return todo_to_response(todo)


@router.delete("/{todo_id}", response_model=MessageResponse, summary="Delete a todo")
def delete(
    todo_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return MessageResponse(message=delete_todo(db=db, owner_id=owner_id, todo_id=todo_id))
