from __future__ import annotations

from adgate.services._shared.ports.analytics_sink import AdEvent, AnalyticsSink
from adgate.uow.base import UnitOfWorkFactory
from adgate.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


class UnitOfWorkAnalyticsSink(AnalyticsSink):
    """Appends each event in its own read-write unit of work."""

    def __init__(self, uow_factory: UnitOfWorkFactory | None = None) -> None:
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork

    def append(self, event: AdEvent) -> None:
        with self._uow_factory() as uow:
            uow.ad_events.create(
                user_id=event.user_id,
                ad_type=event.ad_type,
                action=event.action,
                ad_network_id=event.ad_network_id,
                timestamp=event.timestamp,
            )
