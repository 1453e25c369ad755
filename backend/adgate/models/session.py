"""Login session and refresh ledger models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from adgate.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin, TimestampMixin
from .enums import RefreshTokenStatus


class LoginSession(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One active login of a user on one device.

    The session is the unit that logout and theft detection revoke. It is
    bound to its refresh chain through ``chain_id`` and to the currently valid
    access credential through ``access_token_hash`` (SHA-256 of its ``jti``).
    Rotation rebinds the hash in place; revocation deletes the row.
    """

    __tablename__ = "sessions"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    chain_id: Mapped[str] = mapped_column(String(32), nullable=False)
    access_token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("chain_id", name="uq_sessions_chain_id"),
        Index("ix_sessions_user_id", "user_id"),
        Index("ix_sessions_access_token_hash", "access_token_hash"),
    )


class RefreshLedgerEntry(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    One issued refresh credential.

    Entries of one login form a chain (``chain_id``) linked through
    ``parent_id``. At most one entry per chain is ``LIVE``; an entry leaves
    ``LIVE`` exactly once and never returns to it.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    chain_id: Mapped[str] = mapped_column(String(32), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("refresh_tokens.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[RefreshTokenStatus] = mapped_column(
        SAEnum(
            RefreshTokenStatus,
            name="enum_refresh_token_status",
            native_enum=True,
            create_constraint=True,
        ),
        nullable=False,
        default=RefreshTokenStatus.LIVE,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    spent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id_status", "user_id", "status"),
        Index("ix_refresh_tokens_chain_id", "chain_id"),
    )
