from __future__ import annotations

from datetime import datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from adgate.core.clock import as_utc, utcnow
from adgate.services._shared.ports import TokenDenylistStore


class RedisTokenDenylistStore(TokenDenylistStore):
    """
    Denylist for **access tokens** by jti.

    Each entry is a marker key whose TTL matches the remaining lifetime of
    the token it denies, so Redis drops it once the token is expired anyway.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "deny:at:") -> None:
        self.r = r
        self.prefix = prefix

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        remaining = (as_utc(expires_at) - utcnow()).total_seconds()
        self.r.set(self._k(jti), "1", ex=max(1, int(remaining)))
