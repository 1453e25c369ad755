"""Service layer public API.

This package exposes the use cases of the service layer so that callers can
import from :mod:`adgate.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``adgate.services._shared.base``)
    * :class:`BaseService`

- Auth (from ``adgate.services.auth``)
    * :class:`AuthService`, :class:`CredentialIssuer`, :class:`RefreshRotation`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`TokenPairOut`, :class:`AuthTokenConfig`

- Entitlements (from ``adgate.services.entitlements``)
    * :class:`EntitlementGate`, :class:`EntitlementOut`

- Ads (from ``adgate.services.ads``)
    * :class:`AdService`
    * DTOs: :class:`AdConfigUpsertIn`, :class:`TrackEventIn`,
      :class:`AdPlacementOut`, :class:`AdConfigOut`, :class:`AnalyticsRowOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .ads.dto import (
    AdConfigOut,
    AdConfigUpsertIn,
    AdPlacementOut,
    AnalyticsRowOut,
    TrackEventIn,
)
from .ads.service import AdService
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from .auth.issuer import CredentialIssuer
from .auth.rotation import RefreshRotation
from .auth.service import AuthService
from .entitlements.dto import EntitlementOut
from .entitlements.gate import EntitlementGate

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "CredentialIssuer",
    "RefreshRotation",
    "AuthTokenConfig",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    # Entitlements
    "EntitlementGate",
    "EntitlementOut",
    # Ads
    "AdService",
    "AdConfigUpsertIn",
    "TrackEventIn",
    "AdPlacementOut",
    "AdConfigOut",
    "AnalyticsRowOut",
]
