"""Repositories for login sessions and the refresh ledger."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from adgate.models.enums import RefreshTokenStatus
from adgate.models.session import LoginSession, RefreshLedgerEntry
from adgate.repositories.base import BaseRepository


class SessionRepository(BaseRepository[LoginSession]):
    """Persistence-only repository for :class:`LoginSession`."""

    model = LoginSession

    def _filterable_fields(self):
        return {"user_id": LoginSession.user_id, "chain_id": LoginSession.chain_id}

    def _updatable_fields(self):
        return {"access_token_hash", "expires_at"}

    def create(
        self,
        *,
        user_id: int,
        chain_id: str,
        access_token_hash: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> LoginSession:
        return self.add(
            LoginSession(
                user_id=user_id,
                chain_id=chain_id,
                access_token_hash=access_token_hash,
                expires_at=expires_at,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    def get_by_chain(self, chain_id: str) -> LoginSession | None:
        """Return the session bound to ``chain_id`` or ``None``."""
        stmt = select(LoginSession).where(LoginSession.chain_id == chain_id)
        return cast(LoginSession | None, self.session.execute(stmt).scalars().first())

    def rebind(self, session_row: LoginSession, *, access_token_hash: str, expires_at: datetime) -> None:
        """Point an existing session at a freshly minted access credential."""
        self.update(session_row, access_token_hash=access_token_hash, expires_at=expires_at)

    def delete_by_chain(self, chain_id: str) -> int:
        """Delete the session of one chain. Returns the number of rows removed."""
        result = self.session.execute(
            delete(LoginSession).where(LoginSession.chain_id == chain_id)
        )
        return int(result.rowcount or 0)

    def delete_all_for_user(self, user_id: int) -> int:
        """Delete every session of a user in one statement."""
        result = self.session.execute(
            delete(LoginSession).where(LoginSession.user_id == user_id)
        )
        return int(result.rowcount or 0)


class RefreshLedgerRepository(BaseRepository[RefreshLedgerEntry]):
    """Persistence-only repository for :class:`RefreshLedgerEntry`.

    Status transitions go through bulk ``UPDATE`` statements guarded on the
    current status so that concurrent writers cannot both win.
    """

    model = RefreshLedgerEntry

    def _filterable_fields(self):
        return {
            "user_id": RefreshLedgerEntry.user_id,
            "chain_id": RefreshLedgerEntry.chain_id,
            "status": RefreshLedgerEntry.status,
        }

    def create(
        self,
        *,
        token: str,
        user_id: int,
        chain_id: str,
        expires_at: datetime,
        created_at: datetime,
        parent_id: int | None = None,
    ) -> RefreshLedgerEntry:
        """Insert a ``LIVE`` entry."""
        return self.add(
            RefreshLedgerEntry(
                token=token,
                user_id=user_id,
                chain_id=chain_id,
                parent_id=parent_id,
                status=RefreshTokenStatus.LIVE,
                expires_at=expires_at,
                created_at=created_at,
            )
        )

    def find_by_token(self, token: str) -> RefreshLedgerEntry | None:
        """Return the ledger entry for an opaque token value."""
        stmt = select(RefreshLedgerEntry).where(RefreshLedgerEntry.token == token)
        return cast(RefreshLedgerEntry | None, self.session.execute(stmt).scalars().first())

    def mark_spent(self, entry_id: int, *, spent_at: datetime) -> bool:
        """Compare-and-set ``LIVE → SPENT`` for one entry.

        :returns: ``True`` when this call performed the transition; ``False``
            when the entry was no longer ``LIVE``.
        """
        stmt = (
            update(RefreshLedgerEntry)
            .where(
                RefreshLedgerEntry.id == entry_id,
                RefreshLedgerEntry.status == RefreshTokenStatus.LIVE,
            )
            .values(status=RefreshTokenStatus.SPENT, spent_at=spent_at)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0) == 1

    def revoke_chain(self, chain_id: str) -> int:
        """Flip the ``LIVE`` entries of one chain to ``REVOKED``."""
        stmt = (
            update(RefreshLedgerEntry)
            .where(
                RefreshLedgerEntry.chain_id == chain_id,
                RefreshLedgerEntry.status == RefreshTokenStatus.LIVE,
            )
            .values(status=RefreshTokenStatus.REVOKED)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def revoke_all_for_user(self, user_id: int) -> int:
        """Flip every ``LIVE`` entry of a user to ``REVOKED``."""
        stmt = (
            update(RefreshLedgerEntry)
            .where(
                RefreshLedgerEntry.user_id == user_id,
                RefreshLedgerEntry.status == RefreshTokenStatus.LIVE,
            )
            .values(status=RefreshTokenStatus.REVOKED)
        )
        return int(self.session.execute(stmt).rowcount or 0)
