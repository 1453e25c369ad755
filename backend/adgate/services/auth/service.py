from __future__ import annotations

import logging
import secrets

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from adgate.core.clock import as_utc
from adgate.services._shared.base import BaseService, Clock
from adgate.services._shared.errors import (
    ConflictError,
    EmailNotVerified,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFoundError,
    PersistenceError,
    SessionNotFound,
)
from adgate.services._shared.ports.denylist_store import TokenDenylistStore
from adgate.services._shared.ports.token_provider import TokenProvider
from adgate.services.auth.credentials import hash_jti
from adgate.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    TokenPairOut,
    UserOut,
    WhoAmIOut,
)
from adgate.services.auth.issuer import CredentialIssuer
from adgate.services.auth.rotation import RefreshRotation
from adgate.services.entitlements.gate import EntitlementGate
from adgate.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)


def _user_out(user) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        nickname=user.nickname,
        is_verified=bool(user.is_verified),
    )


class AuthService(BaseService):
    """
    Authentication lifecycle (register / verify / login / refresh / logout).

    Issuance and rotation are delegated to :class:`CredentialIssuer` and
    :class:`RefreshRotation`; early revocation of access credentials goes
    through the :class:`TokenDenylistStore` port.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore,
        token_cfg: AuthTokenConfig | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param token_provider: Adapter signing access credentials.
        :param denylist_store: Denylist for access tokens (``jti`` based).
        :param token_cfg: Lifetimes and refresh entropy.
        :param uow_factory: Storage backend override.
        :param clock: Service clock override.
        """
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.cfg = token_cfg or AuthTokenConfig()
        self.denylist = denylist_store
        self.issuer = CredentialIssuer(
            token_provider=token_provider, token_cfg=self.cfg, uow_factory=uow_factory, clock=clock
        )
        self.rotation = RefreshRotation(
            token_provider=token_provider, token_cfg=self.cfg, uow_factory=uow_factory, clock=clock
        )
        self.gate = EntitlementGate(uow_factory=uow_factory, clock=clock)

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create a FREE, unverified account.

        :raises ConflictError: If the email is already registered.
        """
        token = secrets.token_urlsafe(32)
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(dto.email):
                    raise ConflictError("User", "Email already registered")
                user = uow.users.create(
                    email=dto.email,
                    nickname=dto.nickname,
                    password=dto.password,
                    verification_token=token,
                )
                out = _user_out(user)
        except IntegrityError as exc:
            raise ConflictError("User", "Email already registered") from exc
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not create the account") from exc

        log.info("auth.register.ok", extra={"user_id": out.id})
        return RegisterOut(user=out, verification_token=token)

    def verify_email(self, token: str) -> UserOut:
        """
        Confirm an email address with its verification token.

        :raises NotFoundError: If no pending verification matches ``token``.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_verification_token(token)
            if user is None:
                raise NotFoundError("VerificationToken", "invalid")
            uow.users.update(user, is_verified=True, verification_token=None)
            out = _user_out(user)

        log.info("auth.verify_email.ok", extra={"user_id": out.id})
        return out

    # ------------------------------------------------------------------ #
    # Login / refresh
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Verify credentials and issue a fresh pair.

        Unknown email and wrong password raise the same error. The email
        check runs only after the password matched.

        :raises InvalidCredentials: On any credential mismatch.
        :raises EmailNotVerified: If the account never confirmed its email.
        """
        with self.ro_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            user_id = user.id if user is not None else None
            verified = bool(user is not None and user.is_verified)

        if user_id is None:
            log.info("auth.login.failed")
            raise InvalidCredentials()
        if not verified:
            log.info("auth.login.unverified", extra={"user_id": user_id})
            raise EmailNotVerified()

        pair = self.issuer.issue(user_id)
        log.info("auth.login.ok", extra={"user_id": user_id})
        return pair

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        if not dto.refresh_token:
            raise InvalidRefreshToken()
        return self.rotation.rotate(dto.refresh_token)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the caller's session, or every session with ``all_sessions``.

        The presented access token is denylisted until its own expiry.

        :raises SessionNotFound: If the caller's session no longer exists.
        """
        with self.rw_uow() as uow:
            if dto.all_sessions:
                sessions = uow.sessions.delete_all_for_user(dto.user_id)
                entries = uow.refresh_tokens.revoke_all_for_user(dto.user_id)
            else:
                row = uow.sessions.get_by_chain(dto.chain_id)
                if row is None or row.user_id != dto.user_id:
                    raise SessionNotFound()
                sessions = uow.sessions.delete_by_chain(dto.chain_id)
                entries = uow.refresh_tokens.revoke_chain(dto.chain_id)

        self.denylist.revoke_jti(jti=dto.jti, expires_at=dto.expires_at)
        log.info(
            "auth.logout.ok",
            extra={
                "user_id": dto.user_id,
                "chain_id": dto.chain_id,
                "revoked": {"sessions": sessions, "entries": entries},
            },
        )

    def session_is_current(self, *, chain_id: str, jti: str, user_id: int) -> bool:
        """
        Whether an access token still belongs to a live session.

        The session must exist, belong to ``user_id``, be unexpired, and be
        bound to this token's ``jti``; rotation rebinds it, so an access token
        stops validating once its successor is minted.
        """
        with self.ro_uow() as uow:
            row = uow.sessions.get_by_chain(chain_id)
            if row is None or row.user_id != user_id:
                return False
            if as_utc(row.expires_at) <= self.now():
                return False
            return row.access_token_hash == hash_jti(jti)

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def whoami(self, user_id: int) -> WhoAmIOut:
        """
        Profile and entitlement snapshot of the authenticated user.

        :raises NotFoundError: If the user vanished.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return WhoAmIOut(user=_user_out(user), entitlement=self.gate.snapshot(user))
