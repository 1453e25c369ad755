"""Entitlement gate: decides whether a user is shown ads.

The decision is a pure function of the stored subscription state, its expiry
and the current instant. Anything that prevents reading that state leaves the
user restricted, so a storage outage never hides ads from a free user.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from adgate.core.clock import as_utc
from adgate.models.enums import SubscriptionState
from adgate.services._shared.base import BaseService
from adgate.services._shared.errors import EntitlementLookupFailure
from adgate.services.entitlements.dto import EntitlementOut

log = logging.getLogger(__name__)


def decide_restricted(
    state: SubscriptionState,
    expiry: datetime | None,
    now: datetime,
) -> bool:
    """
    Apply the entitlement decision table.

    ============================  =========================================
    state                         restricted
    ============================  =========================================
    ``LIFETIME``                  never
    ``SUBSCRIPTION_ACTIVE``       unless ``expiry`` is strictly after ``now``
    ``FREE``                      always
    ============================  =========================================

    :raises EntitlementLookupFailure: On a state outside the enumeration.
    """
    match state:
        case SubscriptionState.LIFETIME:
            return False
        case SubscriptionState.SUBSCRIPTION_ACTIVE:
            ends = as_utc(expiry)
            return not (ends is not None and ends > now)
        case SubscriptionState.FREE:
            return True
        case _:
            raise EntitlementLookupFailure(f"Unknown subscription state: {state!r}")


class EntitlementGate(BaseService):
    """Read-only entitlement checks."""

    def is_restricted(self, user_id: int, *, now: datetime | None = None) -> bool:
        """
        Return ``True`` when ads must be shown to ``user_id``.

        Unknown users and failed lookups are restricted.

        :param user_id: User to check.
        :param now: Decision instant; defaults to the service clock.
        """
        at = as_utc(now) or self.now()
        try:
            stored = self._load(user_id)
            if stored is None:
                log.info("entitlements.user_not_found", extra={"user_id": user_id})
                return True
            state, expiry = stored
            return decide_restricted(state, expiry, at)
        except EntitlementLookupFailure as exc:
            log.warning(
                "entitlements.lookup_failed: %s", exc, extra={"user_id": user_id}
            )
            return True

    def snapshot(self, user: Any, *, now: datetime | None = None) -> EntitlementOut:
        """
        Build an :class:`EntitlementOut` from an already loaded user.

        :param user: Object exposing ``subscription_state`` and ``subscription_expiry``.
        """
        at = as_utc(now) or self.now()
        try:
            restricted = decide_restricted(user.subscription_state, user.subscription_expiry, at)
        except EntitlementLookupFailure:
            restricted = True
        return EntitlementOut(
            subscription_state=user.subscription_state,
            subscription_expiry=as_utc(user.subscription_expiry),
            show_ads=restricted,
        )

    def _load(self, user_id: int) -> tuple[SubscriptionState, datetime | None] | None:
        try:
            with self.ro_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    return None
                return user.subscription_state, user.subscription_expiry
        except Exception as exc:
            raise EntitlementLookupFailure(f"{exc.__class__.__name__}: {exc}") from exc
