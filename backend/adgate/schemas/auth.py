"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from adgate.models.enums import SubscriptionState

from .common import enum_field


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    nickname = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class VerifyEmailSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1, max=256)
    )


class LogoutSchema(Schema):
    all_sessions = fields.Boolean(load_default=False, data_key="allSessions")


class TokenPairSchema(Schema):
    """Response payload containing the credential pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    token_type = fields.String(data_key="tokenType")


class UserSchema(Schema):
    """Public user representation."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    nickname = fields.String(required=True)
    is_verified = fields.Boolean(data_key="isVerified")


class EntitlementSchema(Schema):
    subscription_state = enum_field(SubscriptionState, data_key="subscriptionState")
    subscription_expiry = fields.DateTime(allow_none=True, data_key="subscriptionExpiry")
    show_ads = fields.Boolean(data_key="showAds")


class WhoAmISchema(Schema):
    """Response payload exposing identity and entitlement of the caller."""

    user = fields.Nested(UserSchema)
    entitlement = fields.Nested(EntitlementSchema)
