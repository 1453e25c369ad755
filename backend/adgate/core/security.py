"""Access-token policy for flask-jwt-extended.

Wires the JWT manager callbacks:

- A token is revoked when its ``jti`` is denylisted, or when the session named
  by its ``sid`` claim is gone, expired, or bound to a newer access token.
- Every JWT failure is rendered as an RFC 7807 ``401`` problem.

The denylist is Redis-backed when ``REDIS_URL`` is configured and
process-local otherwise.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, current_app

from adgate.core.errors import as_problem, problem_response
from adgate.core.extensions import REDIS_EXTENSION, jwt
from adgate.services._shared.ports.denylist_store import (
    InMemoryDenylistStore,
    TokenDenylistStore,
)
from adgate.services.auth.dto import AuthTokenConfig

log = logging.getLogger(__name__)

DENYLIST_EXTENSION = "token_denylist"


def token_config() -> AuthTokenConfig:
    """Credential settings read from the current application's config."""
    cfg = current_app.config
    return AuthTokenConfig(
        access_expires=cfg["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_expires=cfg["REFRESH_TOKEN_EXPIRES"],
        refresh_bytes=int(cfg["REFRESH_TOKEN_BYTES"]),
    )


def get_denylist() -> TokenDenylistStore:
    return current_app.extensions[DENYLIST_EXTENSION]


def _build_denylist(app: Flask) -> TokenDenylistStore:
    redis_client = app.extensions.get(REDIS_EXTENSION)
    if redis_client is None:
        return InMemoryDenylistStore()

    from adgate.infra.redis.redis_denylist_store import RedisTokenDenylistStore

    return RedisTokenDenylistStore(redis_client)


def _unauthorized(message: str, code: str):
    return problem_response(as_problem(status=401, code=code, message=message)), 401


def init_app(app: Flask) -> None:
    """Install the denylist and the JWT manager callbacks."""
    app.extensions[DENYLIST_EXTENSION] = _build_denylist(app)

    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        jti = jwt_payload.get("jti")
        if not jti or get_denylist().is_revoked(jti):
            return True

        chain_id = jwt_payload.get("sid")
        subject = jwt_payload.get("sub")
        if not chain_id or subject is None:
            return True

        from adgate.api.deps import auth_service

        current = auth_service().session_is_current(
            chain_id=chain_id, jti=jti, user_id=int(subject)
        )
        if not current:
            log.info("auth.access.stale_session", extra={"chain_id": chain_id})
        return not current

    @jwt.unauthorized_loader
    def _missing(reason: str):
        return _unauthorized("Missing access token", "unauthorized")

    @jwt.invalid_token_loader
    def _invalid(reason: str):
        return _unauthorized("Invalid access token", "invalid_token")

    @jwt.expired_token_loader
    def _expired(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Access token expired", "token_expired")

    @jwt.revoked_token_loader
    def _revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Access token revoked", "token_revoked")
