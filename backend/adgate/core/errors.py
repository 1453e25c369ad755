"""RFC 7807 problem responses and the application's error handlers.

Every error leaving the API is ``application/problem+json`` with a stable
``code`` and the request's correlation id. 5xx responses never carry
internal details.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from adgate.core.logger import ensure_request_id

log = logging.getLogger(__name__)

STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a Problem Details body.

    :param status: HTTP status.
    :param code: Machine-readable snake_case code.
    :param message: Client-safe summary, sent as ``detail``.
    :param details: Optional structured, client-safe extras.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def problem_response(problem: dict[str, Any]) -> Response:
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


def _respond(
    status: int,
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    exc_info: bool = False,
):
    problem = as_problem(status=status, code=code, message=message, details=details)
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "http.problem: code=%s status=%s detail=%s",
        code,
        status,
        message,
        exc_info=exc_info,
    )
    return problem_response(problem), status


class APIError(Exception):
    """
    An error the API reports to the client as-is.

    :param message: Client-facing description.
    :param status_code: HTTP status (400 by default).
    :param code: Stable snake_case identifier.
    :param details: Optional structured payload, e.g. the allowed values.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    """401; ``code`` tells clients whether a fresh login is needed."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


class Forbidden(APIError):
    def __init__(self, message: str = "Forbidden", code: str = "forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code=code)


class ServiceUnavailable(APIError):
    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            message, status_code=HTTPStatus.SERVICE_UNAVAILABLE, code="service_unavailable"
        )


def init_app(app: Flask) -> None:
    """Register the problem+json handlers on ``app``."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return _respond(err.status_code, err.code, err.message, details=err.details or None)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(status, code, message)

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return _respond(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        # Raw constraint text stays in the log.
        return _respond(HTTPStatus.CONFLICT, "conflict", "Resource conflict", exc_info=True)

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        return _respond(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        return _respond(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
            exc_info=True,
        )
