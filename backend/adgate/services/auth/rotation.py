"""Refresh rotation with reuse (theft) detection.

Every refresh credential validates exactly once. Exchanging it marks the
ledger entry ``SPENT`` through a compare-and-set and inserts its successor in
the same unit of work. Presenting a ``SPENT`` credential again, or losing the
compare-and-set to a concurrent rotation, revokes every session of the user.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from adgate.core.clock import as_utc
from adgate.models.enums import RefreshTokenStatus
from adgate.services._shared.base import BaseService, Clock
from adgate.services._shared.errors import (
    InvalidRefreshToken,
    PersistenceError,
    RefreshTokenExpired,
    RefreshTokenReused,
    SessionNotFound,
)
from adgate.services._shared.ports.token_provider import TokenProvider
from adgate.services.auth.credentials import AccessMinter, hash_jti, new_refresh_token
from adgate.services.auth.dto import AuthTokenConfig, TokenPairOut
from adgate.services.entitlements.gate import EntitlementGate
from adgate.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


class RefreshRotation(BaseService):
    """Exchanges a live refresh credential for a new pair."""

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        token_cfg: AuthTokenConfig | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.cfg = token_cfg or AuthTokenConfig()
        self.minter = AccessMinter(token_provider, self.cfg)
        self.gate = EntitlementGate(uow_factory=uow_factory, clock=clock)

    def rotate(self, presented: str) -> TokenPairOut:
        """
        Rotate ``presented`` and return the successor pair.

        Checks run in this order: unknown, expired, revoked, spent. Expiry
        wins over reuse: a spent credential replayed after its own
        ``expires_at`` raises :class:`RefreshTokenExpired` and leaves the
        user's sessions alone.

        :raises InvalidRefreshToken: Unknown or revoked credential.
        :raises RefreshTokenExpired: Credential past its expiry.
        :raises RefreshTokenReused: Spent credential presented again; all of
            the user's sessions were revoked before raising.
        :raises SessionNotFound: The chain's session was already removed.
        :raises PersistenceError: Storage failure; nothing was changed.
        """
        now = self.now()
        try:
            with self.rw_uow() as uow:
                entry = uow.refresh_tokens.find_by_token(presented)
                if entry is None:
                    log.info("auth.refresh.unknown_token")
                    raise InvalidRefreshToken()

                ctx = {"user_id": entry.user_id, "chain_id": entry.chain_id, "entry_id": entry.id}

                if as_utc(entry.expires_at) <= now:
                    log.info("auth.refresh.expired", extra=ctx)
                    raise RefreshTokenExpired()

                match entry.status:
                    case RefreshTokenStatus.REVOKED:
                        log.warning("auth.refresh.revoked_token", extra=ctx)
                        raise InvalidRefreshToken()
                    case RefreshTokenStatus.SPENT:
                        raise RefreshTokenReused(entry.user_id)
                    case RefreshTokenStatus.LIVE:
                        pass

                if not uow.refresh_tokens.mark_spent(entry.id, spent_at=now):
                    # A concurrent rotation won the compare-and-set.
                    raise RefreshTokenReused(entry.user_id)

                session_row = uow.sessions.get_by_chain(entry.chain_id)
                if session_row is None:
                    log.warning("auth.refresh.session_missing", extra=ctx)
                    raise SessionNotFound()

                user = uow.users.get(entry.user_id)
                if user is None:
                    log.warning("auth.refresh.user_missing", extra=ctx)
                    raise InvalidRefreshToken()

                access = self.minter.mint(
                    user,
                    chain_id=entry.chain_id,
                    entitlement=self.gate.snapshot(user, now=now),
                    now=now,
                )
                successor = new_refresh_token(self.cfg.refresh_bytes)
                refresh_expires = now + self.cfg.refresh_expires
                uow.refresh_tokens.create(
                    token=successor,
                    user_id=entry.user_id,
                    chain_id=entry.chain_id,
                    parent_id=entry.id,
                    expires_at=refresh_expires,
                    created_at=now,
                )
                uow.sessions.rebind(
                    session_row,
                    access_token_hash=hash_jti(access.jti),
                    expires_at=refresh_expires,
                )
        except RefreshTokenReused as reuse:
            self._revoke_all_sessions(reuse.user_id)
            raise
        except SQLAlchemyError as exc:
            log.error("auth.refresh.persistence_failed: %s", exc.__class__.__name__)
            raise PersistenceError("Could not rotate the refresh token") from exc

        log.info("auth.refresh.ok", extra=ctx)
        return TokenPairOut(access_token=access.token, refresh_token=successor)

    def _revoke_all_sessions(self, user_id: int) -> None:
        """Delete every session of ``user_id`` and retire its live ledger entries."""
        try:
            with self.rw_uow() as uow:
                sessions = uow.sessions.delete_all_for_user(user_id)
                entries = uow.refresh_tokens.revoke_all_for_user(user_id)
        except SQLAlchemyError as exc:
            log.error(
                "auth.refresh.revocation_failed: %s",
                exc.__class__.__name__,
                extra={"user_id": user_id},
            )
            raise PersistenceError("Could not revoke sessions") from exc

        log.error(
            "auth.refresh.reuse_detected",
            extra={"user_id": user_id, "revoked": {"sessions": sessions, "entries": entries}},
        )
