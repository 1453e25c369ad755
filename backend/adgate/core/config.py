"""Environment-selected settings for the adgate API.

``APP_ENV`` picks one of the classes below; individual values come from
environment variables, and a local ``.env`` file is loaded when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"
TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1/true/yes/y/on`` (any case) count as true."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    """Read an integer, falling back to ``default`` when unset or malformed."""
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class BaseConfig:
    """
    Settings shared by every environment.

    Credentials
    -----------
    JWT_SECRET_KEY
        HMAC key signing access tokens.
    JWT_ACCESS_TOKEN_EXPIRES
        Access token lifetime, ``ACCESS_TOKEN_MINUTES`` (15).
    REFRESH_TOKEN_EXPIRES
        Refresh token lifetime, ``REFRESH_TOKEN_DAYS`` (7).
    REFRESH_TOKEN_BYTES
        Entropy of each opaque refresh token (48 bytes).
    EXPOSE_VERIFICATION_TOKEN
        Echo the email-verification token from ``/auth/register``. Email
        delivery lives outside this service, so only development and test
        builds turn this on.
    REDIS_URL
        Shared access-token denylist. Unset means a per-process denylist.

    Runtime
    -------
    SQLALCHEMY_DATABASE_URI
        ``DATABASE_URL``; PostgreSQL in deployments.
    CORS_ORIGINS
        Comma-separated list of allowed browser origins.
    USE_PROXYFIX, PROXYFIX_HOPS
        Trust ``X-Forwarded-*`` from this many reverse proxies.
    """

    APP_ENV = "production"
    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("ACCESS_TOKEN_MINUTES", 15))
    REFRESH_TOKEN_EXPIRES = timedelta(days=env_int("REFRESH_TOKEN_DAYS", 7))
    REFRESH_TOKEN_BYTES = env_int("REFRESH_TOKEN_BYTES", 48)
    EXPOSE_VERIFICATION_TOKEN = env_bool("EXPOSE_VERIFICATION_TOKEN", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:8081")
    CORS_MAX_AGE = 600
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    EXPOSE_VERIFICATION_TOKEN = env_bool("EXPOSE_VERIFICATION_TOKEN", True)


class TestingConfig(BaseConfig):
    """In-memory SQLite, no Redis, exceptions propagate to pytest."""

    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True
    EXPOSE_VERIFICATION_TOKEN = True


class ProductionConfig(BaseConfig):
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Config class named by ``APP_ENV``; unknown or unset means development."""
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "development").strip().lower(), DevelopmentConfig)
