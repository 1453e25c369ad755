"""Ad placement configuration and analytics fact models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from adgate.core.clock import utcnow
from adgate.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .enums import AdAction, AdType

AD_TYPE_ENUM = SAEnum(AdType, name="enum_ad_type", native_enum=True, create_constraint=True)


class AdConfig(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One servable (ad type, ad network) pairing.

    ``display_frequency`` is advisory for the serving client; the selector
    does not weight on it.
    """

    __tablename__ = "ad_configs"

    ad_type: Mapped[AdType] = mapped_column(AD_TYPE_ENUM, nullable=False)
    ad_network_id: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    display_frequency: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("ad_type", "ad_network_id", name="uq_ad_configs_type_network"),
        CheckConstraint("display_frequency >= 1", name="display_frequency_positive"),
        Index("ix_ad_configs_type_active", "ad_type", "is_active"),
    )

    @validates("ad_network_id")
    def _normalize_network(self, key: str, value: str) -> str:
        """Trim the network identifier and reject blank values."""
        v = (value or "").strip()
        if not v:
            raise ValueError("ad_network_id is required.")
        return v


class AdAnalyticsEvent(PKMixin, ReprMixin, db.Model):
    """Append-only ad interaction fact; ``user_id`` is ``None`` for anonymous clients."""

    __tablename__ = "ad_analytics_events"

    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    ad_type: Mapped[AdType] = mapped_column(AD_TYPE_ENUM, nullable=False)
    action: Mapped[AdAction] = mapped_column(
        SAEnum(AdAction, name="enum_ad_action", native_enum=True, create_constraint=True),
        nullable=False,
    )
    ad_network_id: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_ad_analytics_events_timestamp", "timestamp"),
        Index("ix_ad_analytics_events_type_action", "ad_type", "action"),
    )
