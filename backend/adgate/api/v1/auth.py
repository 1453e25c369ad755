"""Authentication endpoints using the service layer."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, request

from adgate.api.deps import (
    auth_service,
    current_claims,
    current_user_id,
    json_response,
    require_auth,
    timing,
    translate_service_errors,
)
from adgate.schemas import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
    VerifyEmailSchema,
    WhoAmISchema,
    envelope,
)
from adgate.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
verify_schema = VerifyEmailSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()
whoami_schema = WhoAmISchema()


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
@translate_service_errors
def register():
    """Register a new FREE, unverified user."""

    data = register_schema.load(_body())
    out = auth_service().register(RegisterIn(**data))
    extra = {}
    if current_app.config.get("EXPOSE_VERIFICATION_TOKEN", False):
        extra["verificationToken"] = out.verification_token
    return json_response(envelope(user_schema.dump(out.user), **extra), status=201)


@bp.post("/verify-email")
@timing
@translate_service_errors
def verify_email():
    data = verify_schema.load(_body())
    user = auth_service().verify_email(data["token"])
    return json_response(envelope(user_schema.dump(user)))


@bp.post("/login")
@timing
@translate_service_errors
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(_body())
    pair = auth_service().login(LoginIn(**data))
    return json_response(envelope(token_schema.dump(pair)))


@bp.post("/refresh")
@timing
@translate_service_errors
def refresh():
    """Rotate a refresh token; presenting a spent one revokes every session."""

    data = refresh_schema.load(_body())
    pair = auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(envelope(token_schema.dump(pair)))


@bp.post("/logout")
@require_auth
@timing
@translate_service_errors
def logout():
    data = logout_schema.load(_body())
    claims = current_claims()
    auth_service().logout(
        LogoutIn(
            user_id=current_user_id(),
            chain_id=claims["sid"],
            jti=claims["jti"],
            expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
            all_sessions=data["all_sessions"],
        )
    )
    return "", 204


@bp.get("/me")
@require_auth
@timing
@translate_service_errors
def me():
    """Return the authenticated user's profile and entitlement."""

    out = auth_service().whoami(current_user_id())
    return json_response(envelope(whoami_schema.dump(out)))
