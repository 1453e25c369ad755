from __future__ import annotations

import threading
from datetime import datetime
from typing import Protocol

from adgate.core.clock import as_utc, utcnow


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist of **access tokens** keyed by ``jti``.

    Entries only need to outlive the token they deny. Methods are idempotent.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...


class InMemoryDenylistStore(TokenDenylistStore):
    """Process-local denylist; entries are dropped once past their expiry."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            expires_at = self._revoked.get(jti)
            if expires_at is None:
                return False
            if expires_at <= utcnow():
                del self._revoked[jti]
                return False
            return True

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        with self._lock:
            self._revoked[jti] = as_utc(expires_at)
