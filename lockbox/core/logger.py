"""JSON logging on stdout with per-request correlation ids.

Each record is emitted as one JSON object. Records produced while serving a
request carry its id, taken from an inbound correlation header or generated,
and every response echoes it in ``X-Request-ID``. Finished requests are
summarized on the ``lockbox.access`` logger.
"""

from __future__ import annotations

import json
import logging
import logging.config
import time
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Checked in order; the first non-empty value becomes the request id.
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Record attributes copied into the JSON payload when present.
EXTRA_KEYS = ("method", "path", "status", "elapsed_ms", "account_id")

access_log = logging.getLogger("lockbox.access")


def ensure_request_id() -> str:
    """Return the id of the current request, assigning one on first use.

    Outside a request context a fresh id is returned each call.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        inbound = (request.headers.get(name) for name in INBOUND_ID_HEADERS)
        request_id = next((value for value in inbound if value), None) or str(uuid4())
        g.request_id = request_id
    return request_id


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to a single JSON stdout handler.

    Calling it again replaces the handler instead of adding another one.
    Loggers created at import time stay enabled.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": RequestIdFilter}},
            "formatters": {"json": {"()": JSONFormatter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "filters": ["request_id"],
                }
            },
            "root": {
                "level": level.upper() if isinstance(level, str) else level,
                "handlers": ["stdout"],
            },
        }
    )


def init_app(app: Flask) -> None:
    """Assign request ids, echo them on responses and write access lines."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        extra: dict[str, Any] = {
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
        }
        started = g.get("request_started")
        if started is not None:
            extra["elapsed_ms"] = round((time.perf_counter() - started) * 1000, 2)
        if g.get("account_id") is not None:
            extra["account_id"] = g.account_id
        access_log.info("%s %s %s", request.method, request.path, response.status_code, extra=extra)
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
