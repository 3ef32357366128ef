"""
Custom exception hierarchy for studylog.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class StudylogException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidInputError(StudylogException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"


class NoteNotFoundError(StudylogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOTE_NOT_FOUND"

    def __init__(self, note_id: int):
        super().__init__(
            message=f"Note {note_id} not found.",
            details={"note_id": note_id},
        )


class TodoNotFoundError(StudylogException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "TODO_NOT_FOUND"

    def __init__(self, todo_id: int):
        super().__init__(
            message=f"Todo {todo_id} not found.",
            details={"todo_id": todo_id},
        )


class ForbiddenError(StudylogException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class AuthenticationError(StudylogException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Missing or invalid bearer token."):
        super().__init__(message=message)


class UpstreamFailureError(StudylogException):
    """The enrichment provider failed or returned an unusable payload."""
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "UPSTREAM_FAILURE"


class StorageFailureError(StudylogException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_FAILURE"

    def __init__(self, message: str = "A storage error occurred."):
        super().__init__(message=message)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def studylog_exception_handler(
    request: Request, exc: StudylogException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("storage_failure", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=StorageFailureError().to_dict(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
