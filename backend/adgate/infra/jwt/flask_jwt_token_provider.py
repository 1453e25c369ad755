from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from flask_jwt_extended import create_access_token, decode_token

from adgate.services._shared.ports import TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Access credentials signed by flask-jwt-extended.

    The subject is always encoded as a string. When ``jti`` is given it
    replaces the library-generated one, because the login session stores a
    hash of it.

    .. note::
       Needs an application context; signing key and lifetime come from
       ``JWT_SECRET_KEY`` / ``JWT_ACCESS_TOKEN_EXPIRES``.
    """

    allow_expired_decode: bool = False

    def create_access_token(
        self,
        *,
        identity: str | int,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        jti: str | None = None,
    ) -> str:
        claims = {**(additional_claims or {}), **({"jti": jti} if jti is not None else {})}
        token: str = create_access_token(
            identity=str(identity),
            additional_claims=claims,
            expires_delta=expires_delta,
        )
        if jti is not None and self.get_jti(token) != jti:
            raise RuntimeError("flask-jwt-extended replaced the requested jti")
        return token

    def decode(self, token: str) -> dict[str, Any]:
        return dict(decode_token(token, allow_expired=self.allow_expired_decode))

    def get_jti(self, token: str) -> str:
        return str(self.decode(token)["jti"])

    def get_expires_at(self, token: str) -> datetime:
        return datetime.fromtimestamp(int(self.decode(token)["exp"]), tz=UTC)
