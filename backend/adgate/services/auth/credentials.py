"""Credential primitives shared by issuance and rotation."""

from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from adgate.services._shared.ports.token_provider import TokenProvider
from adgate.services.auth.dto import AuthTokenConfig
from adgate.services.entitlements.dto import EntitlementOut


def hash_jti(jti: str) -> str:
    """SHA-256 hex digest of an access token ``jti`` as stored on the session."""
    return hashlib.sha256(jti.encode("utf-8")).hexdigest()


def new_refresh_token(nbytes: int) -> str:
    return secrets.token_urlsafe(nbytes)


def new_identifier() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class MintedAccess:
    """
    A freshly signed access credential.

    :param token: Encoded JWT.
    :type token: str
    :param jti: Token identifier (hashed onto the session).
    :type jti: str
    :param expires_at: Expiry (UTC).
    :type expires_at: datetime
    """

    token: str
    jti: str
    expires_at: datetime


class AccessMinter:
    """Signs access credentials carrying the identity and entitlement claims."""

    def __init__(self, tokens: TokenProvider, cfg: AuthTokenConfig) -> None:
        self.tokens = tokens
        self.cfg = cfg

    def mint(
        self,
        user: Any,
        *,
        chain_id: str,
        entitlement: EntitlementOut,
        now: datetime,
    ) -> MintedAccess:
        """
        Mint an access credential for ``user`` bound to session ``chain_id``.

        Claims: ``email``, ``is_verified``, ``subscription_state`` and ``sid``.
        """
        jti = new_identifier()
        claims: dict[str, Any] = {
            "email": user.email,
            "is_verified": bool(user.is_verified),
            "subscription_state": entitlement.subscription_state.value,
            "sid": chain_id,
        }
        token = self.tokens.create_access_token(
            identity=str(user.id),
            additional_claims=claims,
            expires_delta=self.cfg.access_expires,
            jti=jti,
        )
        return MintedAccess(token=token, jti=jti, expires_at=now + self.cfg.access_expires)
