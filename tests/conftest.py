"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
Every test gets a fresh owner id, so rows written by one test never show
up in another test's queries.
"""
import itertools
import os
from concurrent.futures import Executor, Future

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_studylog.db")
os.environ.setdefault("LOG_JSON", "false")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from studylog.core.config import settings
from studylog.core.errors import UpstreamFailureError
from studylog.db.base import Base, get_db
from studylog.main import app
from studylog.services.dispatcher import EnrichmentDispatcher, get_dispatcher
from studylog.services.enrichment import EnrichmentProvider, EnrichmentResult

SQLITE_URL = "sqlite:///./test_studylog.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_owner_ids = itertools.count(1000)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

def make_result(**overrides) -> EnrichmentResult:
    fields = dict(
        refined_note="# Mutexes\n\nLock before touching shared state.",
        summary={"keywords": ["mutex"], "oneLineSummary": "Mutexes guard shared state."},
        fact_checks=[{"originalText": "Mutexes are free", "verdict": "FALSE",
                      "correction": "Locking has a cost."}],
        feedback={"type": "GOOD", "message": "Clear notes."},
        skill_update_proposal={"category": "Concurrency", "stack": "Go", "newSkills": ["sync.Mutex"]},
        suggested_todos=[{"content": "Write a counter with sync.Mutex", "deadlineType": "SHORT_TERM"}],
        generated_title="Understanding Mutexes",
    )
    fields.update(overrides)
    return EnrichmentResult(**fields)


class FakeProvider(EnrichmentProvider):
    """Returns `result`, or raises `error` when set. Records every call."""

    def __init__(self):
        self.result = make_result()
        self.error: Exception | None = None
        self.calls: list[str] = []

    def enrich(self, raw_text: str) -> EnrichmentResult:
        self.calls.append(raw_text)
        if self.error is not None:
            raise self.error
        return self.result


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


class DeferredExecutor(Executor):
    """Queues submitted work until run_pending() is called."""

    def __init__(self):
        self.pending: list[tuple] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_pending(self) -> int:
        ran = 0
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as exc:
                future.set_exception(exc)
            ran += 1
        return ran


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def owner_id() -> int:
    return next(_owner_ids)


@pytest.fixture()
def other_owner_id() -> int:
    return next(_owner_ids)


def token_for(user_id) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture()
def auth_headers(owner_id) -> dict:
    return {"Authorization": f"Bearer {token_for(owner_id)}"}


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture()
def dispatcher(provider, executor) -> EnrichmentDispatcher:
    return EnrichmentDispatcher(
        session_factory=TestingSessionLocal,
        provider=provider,
        executor=executor,
    )


@pytest.fixture()
def client(dispatcher):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def upstream_failure() -> UpstreamFailureError:
    return UpstreamFailureError("provider unavailable")
