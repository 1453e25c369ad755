"""Extension singletons shared by the application factory and the models."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION = "redis_client"

# Constraint names must match the ones spelled out in the migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    session_options={"autoflush": False},
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def _connect_redis(app: Flask) -> None:
    """Attach a Redis client when ``REDIS_URL`` is set.

    A configured but unreachable Redis aborts start-up: a worker silently
    falling back to a process-local denylist would accept tokens revoked
    elsewhere.
    """
    url = app.config.get("REDIS_URL")
    if not url:
        app.extensions.pop(REDIS_EXTENSION, None)
        return
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    app.extensions[REDIS_EXTENSION] = client


def init_app(app: Flask) -> None:
    """Bind the database, migrations, the JWT manager and Redis to ``app``."""
    db.init_app(app)

    # Model import registers every table on ``db.metadata`` for Alembic.
    from adgate import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    _connect_redis(app)
