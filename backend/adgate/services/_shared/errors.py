"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP. They are the stable contract between repositories, services and the
API layer, which translates them to RFC 7807 responses through
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    These are *not* HTTP errors; the API layer translates them.
    """


# --------------------------------------------------------------------------- #
# Generic domain errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "AdConfig").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class PersistenceError(ServiceError):
    """Raised when storage fails mid-operation and the unit of work was rolled back."""

    def __init__(self, message: str = "Storage failure") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class AuthError(ServiceError):
    """Base for credential and session failures (all surface as 401)."""

    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentials(AuthError):
    """Unknown email, wrong password, or unknown user id at issuance."""

    default_message = "Invalid credentials"


class InvalidRefreshToken(AuthError):
    """Presented refresh token is unknown or was revoked."""

    default_message = "Refresh token is no longer valid"


class RefreshTokenExpired(AuthError):
    """Presented refresh token is past its expiry."""

    default_message = "Refresh token expired"


class RefreshTokenReused(AuthError):
    """
    A spent refresh token was presented again.

    Raised after every session of ``user_id`` has been revoked.
    """

    default_message = "Refresh token is no longer valid"

    def __init__(self, user_id: int, message: str | None = None) -> None:
        super().__init__(message)
        self.user_id = user_id


class EmailNotVerified(AuthError):
    """Correct password, but the account has not confirmed its email yet."""

    default_message = "Email address is not verified"


class SessionNotFound(AuthError):
    """The login session bound to a credential no longer exists."""

    default_message = "Session not found"


# --------------------------------------------------------------------------- #
# Entitlements
# --------------------------------------------------------------------------- #


class EntitlementLookupFailure(ServiceError):
    """Entitlement state could not be read; callers downgrade to "restricted"."""
