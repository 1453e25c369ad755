from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from adgate.services.entitlements.dto import EntitlementOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param email: User email (normalized by the model).
    :type email: str
    :param nickname: Display name.
    :type nickname: str
    :param password: Raw password (hashed by the model).
    :type password: str
    """

    email: str
    nickname: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh credential.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout, built from the verified access token.

    :param user_id: Authenticated user.
    :type user_id: int
    :param chain_id: Session chain carried in the ``sid`` claim.
    :type chain_id: str
    :param jti: Identifier of the presented access token.
    :type jti: str
    :param expires_at: Expiry of the presented access token.
    :type expires_at: datetime
    :param all_sessions: If True, revoke every session of the user.
    :type all_sessions: bool
    """

    user_id: int
    chain_id: str
    jti: str
    expires_at: datetime
    all_sessions: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh credentials.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh credential.
    :type refresh_token: str
    :param token_type: Authorization scheme for the access token.
    :type token_type: str
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public projection of a user.

    :param id: User id.
    :param email: Normalized email.
    :param nickname: Display name.
    :param is_verified: Email confirmation flag.
    """

    id: int
    email: str
    nickname: str
    is_verified: bool


@dataclass(frozen=True, slots=True)
class RegisterOut:
    """
    Registration result.

    ``verification_token`` is handed to the email collaborator by the caller.
    The API echoes it back only when ``EXPOSE_VERIFICATION_TOKEN`` is set.
    """

    user: UserOut
    verification_token: str


@dataclass(frozen=True, slots=True)
class WhoAmIOut:
    user: UserOut
    entitlement: EntitlementOut


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Credential lifetimes and refresh token entropy.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param refresh_bytes: Random bytes per refresh token.
    :type refresh_bytes: int
    """

    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    refresh_bytes: int = 48
