from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from adgate.core import errors as api_errors
from adgate.core.clock import utcnow
from adgate.services._shared.errors import (
    ConflictError,
    EmailNotVerified,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFoundError,
    PersistenceError,
    RefreshTokenExpired,
    RefreshTokenReused,
    ServiceError,
    SessionNotFound,
)
from adgate.uow.base import UnitOfWork, UnitOfWorkFactory
from adgate.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide read-only and read-write units of work.
    * Provide the service clock.
    * Centralize error translation.

    Notes
    -----
    - Services never touch the global session; they always go through a
      Unit of Work.
    - ``uow_factory`` swaps the storage backend for both read and write
      scopes (tests pass an in-memory factory).
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param uow_factory: Zero-argument callable returning a fresh Unit of
            Work. ``None`` selects the SQLAlchemy units of work.
        :param clock: Callable returning the current aware UTC datetime.
        """
        self._uow_factory = uow_factory
        self._clock = clock or utcnow

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: UnitOfWork
        """
        if self._uow_factory is not None:
            return self._uow_factory()
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> UnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: UnitOfWork
        """
        if self._uow_factory is not None:
            return self._uow_factory()
        return SQLAlchemyReadOnlyUnitOfWork()

    def now(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        Unknown and reused refresh tokens share one message so the response
        never tells an attacker which of the two happened.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, InvalidCredentials):
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        if isinstance(exc, EmailNotVerified):
            return api_errors.Forbidden(str(exc), code="email_not_verified")

        if isinstance(exc, InvalidRefreshToken | RefreshTokenReused):
            return api_errors.Unauthorized(
                InvalidRefreshToken.default_message, code="invalid_refresh_token"
            )

        if isinstance(exc, RefreshTokenExpired):
            return api_errors.Unauthorized(str(exc), code="refresh_token_expired")

        if isinstance(exc, SessionNotFound):
            return api_errors.Unauthorized(str(exc), code="session_not_found")

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, PersistenceError):
            return api_errors.ServiceUnavailable()

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        return exc
