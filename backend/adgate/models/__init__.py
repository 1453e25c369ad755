from adgate.models.ad import AdAnalyticsEvent, AdConfig
from adgate.models.enums import AdAction, AdType, RefreshTokenStatus, SubscriptionState
from adgate.models.session import LoginSession, RefreshLedgerEntry
from adgate.models.user import User

__all__ = [
    "AdAction",
    "AdAnalyticsEvent",
    "AdConfig",
    "AdType",
    "LoginSession",
    "RefreshLedgerEntry",
    "RefreshTokenStatus",
    "SubscriptionState",
    "User",
]
