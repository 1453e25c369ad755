"""Ad serving selector, analytics forwarding and placement administration."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from adgate.core.clock import as_utc
from adgate.models.enums import AdAction, AdType
from adgate.services._shared.base import BaseService, Clock
from adgate.services._shared.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ServiceError,
)
from adgate.services._shared.ports.analytics_sink import AdEvent, AnalyticsSink
from adgate.services.ads.dto import (
    AdConfigOut,
    AdConfigUpsertIn,
    AdPlacementOut,
    AnalyticsRowOut,
    TrackEventIn,
)
from adgate.services.ads.sink import UnitOfWorkAnalyticsSink
from adgate.services.entitlements.gate import EntitlementGate
from adgate.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


def _config_out(config) -> AdConfigOut:
    return AdConfigOut(
        id=config.id,
        ad_type=config.ad_type,
        ad_network_id=config.ad_network_id,
        is_active=bool(config.is_active),
        display_frequency=int(config.display_frequency),
        created_at=as_utc(config.created_at),
        updated_at=as_utc(config.updated_at),
    )


class AdService(BaseService):
    """
    Ad path use cases.

    The serving path is soft: storage problems degrade to "no ad" and
    analytics failures are logged and swallowed. Administrative operations
    surface errors normally.
    """

    def __init__(
        self,
        *,
        sink: AnalyticsSink | None = None,
        gate: EntitlementGate | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.gate = gate or EntitlementGate(uow_factory=uow_factory, clock=clock)
        self.sink = sink or UnitOfWorkAnalyticsSink(uow_factory)

    # ------------------------------------------------------------------ #
    # Serving
    # ------------------------------------------------------------------ #

    def select_ad(self, ad_type: AdType, user_id: int | None = None) -> AdPlacementOut | None:
        """
        Pick the placement to serve for ``ad_type``.

        Entitled users get ``None``. Anonymous callers are treated as
        restricted. Among active configurations the most recently created one
        wins. No analytics event is written here; clients report impressions
        through :meth:`record_event`.

        :returns: The placement, or ``None`` when nothing should be shown.
        """
        if user_id is not None and not self.gate.is_restricted(user_id):
            log.debug("ads.serve.entitled", extra={"user_id": user_id, "ad_type": ad_type.value})
            return None

        try:
            with self.ro_uow() as uow:
                configs = uow.ad_configs.list_active(ad_type)
                if not configs:
                    log.info("ads.serve.no_inventory", extra={"ad_type": ad_type.value})
                    return None
                chosen = configs[0]
                return AdPlacementOut(
                    id=chosen.id,
                    ad_type=chosen.ad_type,
                    ad_network_id=chosen.ad_network_id,
                    display_frequency=int(chosen.display_frequency),
                )
        except Exception as exc:
            # Serving degrades to "no ad" on any storage fault.
            log.warning(
                "ads.serve.lookup_failed: %s",
                exc.__class__.__name__,
                extra={"ad_type": ad_type.value},
                exc_info=not isinstance(exc, SQLAlchemyError),
            )
            return None

    # ------------------------------------------------------------------ #
    # Analytics
    # ------------------------------------------------------------------ #

    def record_event(self, dto: TrackEventIn) -> bool:
        """
        Forward one interaction to the analytics sink.

        :returns: ``True`` when the event was appended, ``False`` when the
            sink failed (the failure is logged, never raised).
        """
        event = AdEvent(
            user_id=dto.user_id,
            ad_type=dto.ad_type,
            action=dto.action,
            ad_network_id=dto.ad_network_id,
            timestamp=self.now(),
        )
        extra = {
            "user_id": dto.user_id,
            "ad_type": dto.ad_type.value,
            "action": dto.action.value,
            "ad_network_id": dto.ad_network_id,
        }
        try:
            self.sink.append(event)
        except Exception as exc:
            # Analytics is best-effort; the ad path never fails on it.
            log.warning("ads.track.failed: %s", exc.__class__.__name__, extra=extra)
            return False

        match dto.action:
            case AdAction.ERROR:
                log.warning("ads.track.client_error", extra=extra)
            case AdAction.IMPRESSION | AdAction.CLICK | AdAction.CLOSE:
                log.debug("ads.track.recorded", extra=extra)
        return True

    def aggregate_analytics(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AnalyticsRowOut]:
        """
        Count events per ``(ad_type, action)`` inside an inclusive window.

        :raises ServiceError: If ``start`` is after ``end``.
        """
        start, end = as_utc(start), as_utc(end)
        if start is not None and end is not None and start > end:
            raise ServiceError("startDate must not be after endDate")
        try:
            with self.ro_uow() as uow:
                rows = uow.ad_events.aggregate(start=start, end=end)
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not aggregate analytics") from exc
        return [
            AnalyticsRowOut(ad_type=AdType(ad_type), action=AdAction(action), count=count)
            for ad_type, action, count in rows
        ]

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #

    def list_active_configs(self, ad_type: AdType | None = None) -> list[AdConfigOut]:
        with self.ro_uow() as uow:
            return [_config_out(c) for c in uow.ad_configs.list_active(ad_type)]

    def upsert_config(self, dto: AdConfigUpsertIn) -> AdConfigOut:
        """
        Create or update the placement keyed by ``(ad_type, ad_network_id)``.

        :raises ConflictError: If a concurrent insert won the unique key.
        """
        is_active = True if dto.is_active is None else bool(dto.is_active)
        frequency = 1 if dto.display_frequency is None else int(dto.display_frequency)
        if frequency < 1:
            raise ServiceError("displayFrequency must be at least 1")

        try:
            with self.rw_uow() as uow:
                config = uow.ad_configs.get_by_type_and_network(dto.ad_type, dto.ad_network_id)
                if config is None:
                    config = uow.ad_configs.create(
                        ad_type=dto.ad_type,
                        ad_network_id=dto.ad_network_id,
                        is_active=is_active,
                        display_frequency=frequency,
                    )
                    created = True
                else:
                    uow.ad_configs.update(
                        config, is_active=is_active, display_frequency=frequency
                    )
                    created = False
                out = _config_out(config)
        except IntegrityError as exc:
            raise ConflictError("AdConfig", "Placement already exists") from exc

        log.info(
            "ads.config.created" if created else "ads.config.updated",
            extra={
                "ad_type": out.ad_type.value,
                "ad_network_id": out.ad_network_id,
                "entry_id": out.id,
            },
        )
        return out

    def disable_config(self, config_id: int) -> AdConfigOut:
        """
        Mark a placement inactive.

        :raises NotFoundError: If ``config_id`` does not exist.
        """
        with self.rw_uow() as uow:
            config = uow.ad_configs.get(config_id)
            if config is None:
                raise NotFoundError("AdConfig", config_id)
            uow.ad_configs.update(config, is_active=False)
            out = _config_out(config)

        log.info("ads.config.disabled", extra={"entry_id": config_id})
        return out
