from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Mints and reads signed access credentials.

    Implementations must keep a caller-supplied ``jti`` verbatim and encode
    the subject as a string.
    """

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        jti: str | None = None,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...

    def get_jti(self, token: str) -> str: ...

    def get_expires_at(self, token: str) -> datetime: ...


class StubTokenProvider(TokenProvider):
    """
    Unsigned, inspectable tokens for service tests.

    Tokens look like ``access.<sub>.<jti>.<n>`` and their claims are kept in
    :attr:`issued`; ``exp`` is computed from the fixed ``now``.
    """

    default_ttl = timedelta(minutes=15)

    def __init__(self, *, now: datetime | None = None) -> None:
        self.now = now or datetime.now(tz=UTC)
        self.issued: dict[str, dict[str, Any]] = {}

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        jti: str | None = None,
    ) -> str:
        n = len(self.issued) + 1
        claims: dict[str, Any] = {
            "sub": str(identity),
            "type": "access",
            "jti": jti or f"jti-{n}",
            "exp": int((self.now + (expires_delta or self.default_ttl)).timestamp()),
            **(additional_claims or {}),
        }
        token = f"access.{claims['sub']}.{claims['jti']}.{n}"
        self.issued[token] = claims
        return token

    def decode(self, token: str) -> dict[str, Any]:
        return self.issued[token]

    def get_jti(self, token: str) -> str:
        return str(self.issued[token]["jti"])

    def get_expires_at(self, token: str) -> datetime:
        return datetime.fromtimestamp(int(self.issued[token]["exp"]), tz=UTC)
