from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from adgate.models.enums import SubscriptionState


@dataclass(frozen=True, slots=True)
class EntitlementOut:
    """
    Entitlement snapshot of one user at one instant.

    :param subscription_state: Stored tier.
    :type subscription_state: SubscriptionState
    :param subscription_expiry: End of an active subscription, if any.
    :type subscription_expiry: datetime | None
    :param show_ads: Gate decision at the snapshot instant.
    :type show_ads: bool
    """

    subscription_state: SubscriptionState
    subscription_expiry: datetime | None
    show_ads: bool
