"""Convenience exports for application schemas."""

from __future__ import annotations

from .ads import (
    AdConfigQuerySchema,
    AdConfigSchema,
    AdConfigUpsertSchema,
    AdPlacementSchema,
    AnalyticsQuerySchema,
    AnalyticsRowSchema,
    TrackEventSchema,
)
from .auth import (
    EntitlementSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
    VerifyEmailSchema,
    WhoAmISchema,
)
from .common import enum_field, envelope

__all__ = [
    "AdConfigQuerySchema",
    "AdConfigSchema",
    "AdConfigUpsertSchema",
    "AdPlacementSchema",
    "AnalyticsQuerySchema",
    "AnalyticsRowSchema",
    "EntitlementSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "TrackEventSchema",
    "UserSchema",
    "VerifyEmailSchema",
    "WhoAmISchema",
    "enum_field",
    "envelope",
]
