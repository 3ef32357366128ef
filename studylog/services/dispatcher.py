"""
Fire-and-forget dispatch of note enrichment.

One task per created note, submitted to an executor. Each task opens its
own session, calls the provider once and applies the result. Every
failure is absorbed and logged at the task boundary: nothing propagates
back to the request that submitted it, and there is no retry.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studylog.core.errors import UpstreamFailureError
from studylog.services.enrichment import EnrichmentProvider
from studylog.services.notes import apply_enrichment

logger = logging.getLogger(__name__)


class EnrichmentDispatcher:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        provider: EnrichmentProvider,
        executor: Optional[Executor] = None,
        max_workers: int = 4,
    ):
        self.session_factory = session_factory
        self.provider = provider
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="enrichment"
        )

    def submit(self, note_id: int, raw_content: str, update_title: bool) -> None:
        """Schedule enrichment; the caller gets no handle to the task."""
        future: Future = self.executor.submit(self._run, note_id, raw_content, update_title)
        future.add_done_callback(self._log_escaped)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. In-flight tasks are never cancelled."""
        self.executor.shutdown(wait=wait)

    def _run(self, note_id: int, raw_content: str, update_title: bool) -> bool:
        logger.info("enrichment_started", extra={"note_id": note_id})
        try:
            result = self.provider.enrich(raw_content)
        except UpstreamFailureError as exc:
            logger.warning(
                "enrichment_upstream_failure",
                extra={"note_id": note_id, "error": exc.message, "details": exc.details},
            )
            return False
        except Exception:
            logger.exception("enrichment_provider_error", extra={"note_id": note_id})
            return False

        db = self.session_factory()
        try:
            applied = apply_enrichment(db, note_id, result, update_title)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("enrichment_storage_failure", extra={"note_id": note_id})
            return False
        except Exception:
            db.rollback()
            logger.exception("enrichment_apply_error", extra={"note_id": note_id})
            return False
        finally:
            db.close()

        if applied:
            logger.info("enrichment_completed", extra={"note_id": note_id})
        return applied

    @staticmethod
    def _log_escaped(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("enrichment_task_crashed", exc_info=exc)


def get_dispatcher(request: Request) -> EnrichmentDispatcher:
    """FastAPI dependency — the dispatcher built in the app lifespan."""
    return request.app.state.dispatcher
