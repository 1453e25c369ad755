"""User model: identity plus the entitlement fields read by the ad gate."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from adgate.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .enums import SubscriptionState


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A registered account.

    ``subscription_state`` and ``subscription_expiry`` belong to the payment
    collaborator; adgate only reads them to decide whether ads are shown.

    Fields
    ------
    email : str
        Unique login, lowercased and trimmed on assignment.
    password_hash : str | None
        Werkzeug hash, set through the write-only ``password`` attribute.
        Empty for accounts linked via ``external_identity_id``.
    verification_token : str | None
        Outstanding email-confirmation token; cleared once ``is_verified``.
    subscription_expiry : datetime | None
        End of a ``SUBSCRIPTION_ACTIVE`` period.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(254))
    external_identity_id: Mapped[str | None] = mapped_column(String(255))
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(128))
    subscription_state: Mapped[SubscriptionState] = mapped_column(
        SAEnum(SubscriptionState, name="enum_subscription_state", create_constraint=True),
        nullable=False,
        default=SubscriptionState.FREE,
    )
    subscription_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("external_identity_id", name="uq_users_external_identity_id"),
        Index("ix_users_email", "email"),
        Index("ix_users_verification_token", "verification_token"),
    )

    @property
    def password(self) -> Any:  # pragma: no cover
        raise AttributeError("password is write-only; use verify_password()")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Check ``raw`` against the stored hash; federated accounts never match."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @validates("email")
    def _clean_email(self, _key: str, value: str) -> str:
        address = value.strip().lower() if isinstance(value, str) else ""
        local, _, domain = address.partition("@")
        # Syntax is checked by the request schema; this only guards direct writes.
        if not local or "." not in domain:
            raise ValueError("Email format looks invalid.")
        return address

    @validates("nickname")
    def _clean_nickname(self, _key: str, value: str) -> str:
        name = value.strip() if isinstance(value, str) else ""
        if not name:
            raise ValueError("Nickname is required.")
        return name
