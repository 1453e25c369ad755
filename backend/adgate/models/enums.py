"""Closed domain enumerations persisted as native database enums."""

from __future__ import annotations

from enum import Enum


class SubscriptionState(str, Enum):
    """Entitlement tier of a user; mutated only by payment processing."""

    FREE = "FREE"
    SUBSCRIPTION_ACTIVE = "SUBSCRIPTION_ACTIVE"
    LIFETIME = "LIFETIME"


class RefreshTokenStatus(str, Enum):
    """Lifecycle of one refresh ledger entry.

    ``LIVE`` is the only state that validates. ``SPENT`` marks an entry that
    was exchanged during rotation; presenting it again is treated as theft.
    ``REVOKED`` covers logout and server-side revocation.
    """

    LIVE = "LIVE"
    SPENT = "SPENT"
    REVOKED = "REVOKED"


class AdType(str, Enum):
    """Ad placement formats."""

    BANNER = "BANNER"
    INTERSTITIAL = "INTERSTITIAL"


class AdAction(str, Enum):
    """Client-reported interactions with a served ad."""

    IMPRESSION = "IMPRESSION"
    CLICK = "CLICK"
    CLOSE = "CLOSE"
    ERROR = "ERROR"


__all__ = ["AdAction", "AdType", "RefreshTokenStatus", "SubscriptionState"]
