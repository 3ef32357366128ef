"""
Logging setup: one stdout handler on the root logger, JSON by default.

Request logging is a single HTTP middleware that assigns (or propagates)
an X-Request-Id and emits one `http_request` record per response.
"""
import logging
import sys
import time
import uuid

from fastapi import FastAPI, Request
from pythonjsonlogger.json import JsonFormatter

from studylog.core.config import Settings

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(settings: Settings) -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    root.addHandler(handler)


def register_request_logging(app: FastAPI) -> None:
    request_logger = logging.getLogger("studylog.request")

    @app.middleware("http")
    async def _log_request(request: Request, call_next):
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = rid
        started = time.perf_counter()

        response = await call_next(request)

        latency = int((time.perf_counter() - started) * 1000)
        response.headers.setdefault("X-Request-Id", rid)
        request_logger.info(
            "http_request",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": latency,
            },
        )
        return response
