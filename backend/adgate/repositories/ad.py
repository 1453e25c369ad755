"""Repositories for ad configuration and analytics events."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, cast

from sqlalchemy import Select, func, select

from adgate.models.ad import AdAnalyticsEvent, AdConfig
from adgate.models.enums import AdAction, AdType
from adgate.repositories.base import BaseRepository, apply_sorting


class AdConfigRepository(BaseRepository[AdConfig]):
    """Persistence-only repository for :class:`AdConfig`."""

    model = AdConfig

    def _sortable_fields(self):
        return {
            "created_at": AdConfig.created_at,
            "ad_type": AdConfig.ad_type,
        }

    def _filterable_fields(self):
        return {
            "ad_type": AdConfig.ad_type,
            "ad_network_id": AdConfig.ad_network_id,
            "is_active": AdConfig.is_active,
        }

    def _updatable_fields(self):
        return {"is_active", "display_frequency"}

    def create(
        self,
        *,
        ad_type: AdType,
        ad_network_id: str,
        is_active: bool = True,
        display_frequency: int = 1,
    ) -> AdConfig:
        return self.add(
            AdConfig(
                ad_type=ad_type,
                ad_network_id=ad_network_id,
                is_active=is_active,
                display_frequency=display_frequency,
            )
        )

    def list_active(self, ad_type: AdType | None = None) -> Sequence[AdConfig]:
        """Active configurations, newest first.

        Ties on ``created_at`` are broken by descending id so the most
        recently inserted row still comes first.

        :param ad_type: Restrict to one ad type; ``None`` returns all types.
        """
        filters: dict[str, Any] = {"is_active": True}
        if ad_type is not None:
            filters["ad_type"] = ad_type
        stmt = self._where(select(AdConfig), filters)
        stmt = apply_sorting(
            stmt, self._sortable_fields(), ["-created_at"], pk_attr=AdConfig.id, pk_desc=True
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_by_type_and_network(self, ad_type: AdType, ad_network_id: str) -> AdConfig | None:
        """Return the configuration keyed by ``(ad_type, ad_network_id)``."""
        stmt = select(AdConfig).where(
            AdConfig.ad_type == ad_type,
            AdConfig.ad_network_id == ad_network_id.strip(),
        )
        return cast(AdConfig | None, self.session.execute(stmt).scalars().first())


class AdEventRepository(BaseRepository[AdAnalyticsEvent]):
    """Append-only repository for :class:`AdAnalyticsEvent`."""

    model = AdAnalyticsEvent

    def _filterable_fields(self):
        return {
            "user_id": AdAnalyticsEvent.user_id,
            "ad_type": AdAnalyticsEvent.ad_type,
            "action": AdAnalyticsEvent.action,
        }

    def create(
        self,
        *,
        user_id: int | None,
        ad_type: AdType,
        action: AdAction,
        ad_network_id: str,
        timestamp: datetime | None = None,
    ) -> AdAnalyticsEvent:
        event = AdAnalyticsEvent(
            user_id=user_id,
            ad_type=ad_type,
            action=action,
            ad_network_id=ad_network_id,
        )
        if timestamp is not None:
            event.timestamp = timestamp
        return self.add(event)

    def aggregate(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[tuple[Any, Any, int]]:
        """Count events grouped by ``(ad_type, action)``.

        Bounds are inclusive and optional.

        :returns: ``(ad_type, action, count)`` tuples ordered by ad type then action.
        """
        stmt: Select[Any] = select(
            AdAnalyticsEvent.ad_type,
            AdAnalyticsEvent.action,
            func.count(AdAnalyticsEvent.id),
        )
        if start is not None:
            stmt = stmt.where(AdAnalyticsEvent.timestamp >= start)
        if end is not None:
            stmt = stmt.where(AdAnalyticsEvent.timestamp <= end)
        stmt = stmt.group_by(AdAnalyticsEvent.ad_type, AdAnalyticsEvent.action).order_by(
            AdAnalyticsEvent.ad_type.asc(), AdAnalyticsEvent.action.asc()
        )
        return [(row[0], row[1], int(row[2])) for row in self.session.execute(stmt).all()]
