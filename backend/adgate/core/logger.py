"""JSON-lines logging with per-request correlation ids.

Every record carries ``request_id`` (taken from ``X-Request-ID`` or
``X-Correlation-ID``, generated otherwise) and the structured fields in
:data:`EXTRA_KEYS` when a caller passed them through ``extra={...}``.
Credentials never go into ``extra``; only ids and enum values do.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "user_id",
    "chain_id",
    "entry_id",
    "revoked",
    "ad_type",
    "action",
    "ad_network_id",
)

# Third-party loggers kept at WARNING unless LOG_LEVEL is DEBUG.
NOISY_LOGGERS = ("werkzeug", "sqlalchemy.engine", "urllib3")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the id of the current request, assigning one on first use.

    Outside a request every call returns a fresh uuid4.
    """
    if not has_request_context():
        return str(uuid4())
    cached = getattr(g, "request_id", None)
    if cached:
        return cached
    incoming = next((request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None)
    g.request_id = incoming or str(uuid4())
    return g.request_id


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int = "INFO") -> None:
    """Send the root logger to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root_level = _resolve_level(level)
    root.setLevel(root_level)

    noisy_level = root_level if root_level <= logging.DEBUG else max(root_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def init_app(app: Flask) -> None:
    """Seed the request id before each request and echo it on the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # The app context, and with it ``g``, can outlive a single request.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "EXTRA_KEYS",
    "JSONFormatter",
    "RequestIdFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
