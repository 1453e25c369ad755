"""Shared API helpers for guards, service wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from adgate.core.security import get_denylist, token_config
from adgate.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from adgate.services._shared.base import BaseService
from adgate.services._shared.errors import ServiceError
from adgate.services.ads.service import AdService
from adgate.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Service wiring ------------------------------


def auth_service() -> AuthService:
    """Build the auth service bound to the current application's adapters."""
    return AuthService(
        token_provider=JWTTokenProvider(),
        denylist_store=get_denylist(),
        token_cfg=token_config(),
    )


def ad_service() -> AdService:
    return AdService()


# --------------------------------- Guards -----------------------------------


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, session-bound access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Verify an access token when one is presented; allow anonymous callers."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=True)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int | None:
    """Return the authenticated user id, or ``None`` for anonymous requests."""
    identity = get_jwt_identity()
    if identity is None:
        return None
    return int(identity)


def current_claims() -> dict[str, Any]:
    return dict(get_jwt() or {})


# ----------------------------- Error translation ----------------------------


def translate_service_errors(func: F) -> F:
    """Re-raise :class:`ServiceError` as the matching API error."""

    translator = BaseService()

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise translator.translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


# -------------------------------- Responses ---------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
