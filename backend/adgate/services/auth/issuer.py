from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from adgate.services._shared.base import BaseService, Clock
from adgate.services._shared.errors import InvalidCredentials, PersistenceError
from adgate.services._shared.ports.token_provider import TokenProvider
from adgate.services.auth.credentials import (
    AccessMinter,
    hash_jti,
    new_identifier,
    new_refresh_token,
)
from adgate.services.auth.dto import AuthTokenConfig, TokenPairOut
from adgate.services.entitlements.gate import EntitlementGate
from adgate.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


class CredentialIssuer(BaseService):
    """
    Mints a new (access, refresh) pair for an already verified user.

    The Session row and its first refresh ledger entry are written in one
    unit of work with the same ``created_at``; either both exist afterwards or
    neither does.
    """

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

    def issue(self, user_id: int) -> TokenPairOut:
        """
        Issue a credential pair and open a new session for ``user_id``.

        :raises InvalidCredentials: If the user does not exist.
        :raises PersistenceError: If either write fails; nothing is persisted.
        """
        now = self.now()
        chain_id = new_identifier()
        refresh_token = new_refresh_token(self.cfg.refresh_bytes)
        refresh_expires = now + self.cfg.refresh_expires

        try:
            with self.rw_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    raise InvalidCredentials()

                access = self.minter.mint(
                    user,
                    chain_id=chain_id,
                    entitlement=self.gate.snapshot(user, now=now),
                    now=now,
                )
                uow.sessions.create(
                    user_id=user.id,
                    chain_id=chain_id,
                    access_token_hash=hash_jti(access.jti),
                    expires_at=refresh_expires,
                    created_at=now,
                )
                uow.refresh_tokens.create(
                    token=refresh_token,
                    user_id=user.id,
                    chain_id=chain_id,
                    expires_at=refresh_expires,
                    created_at=now,
                )
        except InvalidCredentials:
            log.info("auth.issue.unknown_user", extra={"user_id": user_id})
            raise
        except SQLAlchemyError as exc:
            log.error(
                "auth.issue.persistence_failed: %s",
                exc.__class__.__name__,
                extra={"user_id": user_id, "chain_id": chain_id},
            )
            raise PersistenceError("Could not persist the new session") from exc

        log.info("auth.issue.ok", extra={"user_id": user_id, "chain_id": chain_id})
        return TokenPairOut(access_token=access.token, refresh_token=refresh_token)
