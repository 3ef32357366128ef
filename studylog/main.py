from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from studylog.db.base import SessionLocal, get_db
from studylog.core.config import settings
from studylog.core.logging import setup_logging, register_request_logging
from studylog.routers import notes as notes_router
from studylog.routers import dashboard as dashboard_router
from studylog.routers import todos as todos_router
from studylog.services.dispatcher import EnrichmentDispatcher
from studylog.services.enrichment import OpenAIEnrichmentProvider
from studylog.core.errors import (
    StudylogException,
    studylog_exception_handler,
    validation_exception_handler,
    storage_exception_handler,
    unhandled_exception_handler,
)

setup_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    dispatcher = EnrichmentDispatcher(
        session_factory=SessionLocal,
        provider=OpenAIEnrichmentProvider.from_settings(settings),
        max_workers=settings.ENRICHMENT_WORKERS,
    )
    app.state.dispatcher = dispatcher
    try:
        yield
    finally:
        # Let in-flight analyses finish; they cannot be cancelled.
        dispatcher.shutdown(wait=True)


app = FastAPI(
    title="studylog API",
    description=(
        "**Study notes with background analysis**\n\n"
        "Stores raw study notes, enriches them asynchronously (refined note, "
        "summary, fact-checks, feedback, suggested todos) and serves an "
        "activity heat-map with a daily streak.\n\n"
        "Analysis is poll-based: create a note, then poll "
        "`GET /notes/{id}/analysis` until `status` is `COMPLETED`.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_request_logging(app)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(StudylogException, studylog_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(notes_router.router)
app.include_router(dashboard_router.router)
app.include_router(todos_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
