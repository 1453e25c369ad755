"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Service tests that
need serializable units of work (atomicity, concurrent rotation) use the
in-memory backend fixtures instead.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from adgate.core.config import TestingConfig
from adgate.core.extensions import db as _db  # Flask-SQLAlchemy instance
from adgate.factory import create_app  # application factory under test
from adgate.services._shared.ports import (
    InMemoryAnalyticsSink,
    InMemoryDenylistStore,
    StubTokenProvider,
)
from adgate.services.auth.dto import AuthTokenConfig
from adgate.uow.memory import InMemoryStore, in_memory_uow_factory

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Never talks to Redis; the process-local denylist is used.
    - Short, explicit token lifetimes.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret-key-with-at-least-32-bytes!"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    REFRESH_TOKEN_BYTES = 32
    REDIS_URL = None
    EXPOSE_VERIFICATION_TOKEN = True
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    No application context stays pushed between tests, so ``g`` never
    carries state from one test into the next.
    """
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def app_ctx(app):
    """Fresh application context per test."""
    with app.app_context() as ctx:
        yield ctx


@pytest.fixture(scope="function")
def session(db, connection, app_ctx):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    The fixture begins a top-level transaction, starts a SAVEPOINT per test,
    and reinstalls the SAVEPOINT whenever SQLAlchemy ends one. Units of work
    that ``commit()`` only release their own SAVEPOINT, so everything is
    discarded when the outer transaction rolls back.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # App code reaches the session through ``db.session``
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- In-memory backend ---------------------------------------------------------
@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def uow_factory(store):
    return in_memory_uow_factory(store)


@pytest.fixture()
def clock():
    """Mutable clock: tests advance ``clock.now`` to move time."""

    class _Clock:
        now = FIXED_NOW

        def __call__(self) -> datetime:
            return self.now

        def advance(self, **delta) -> None:
            self.now = self.now + timedelta(**delta)

    return _Clock()


@pytest.fixture()
def token_provider(clock) -> StubTokenProvider:
    return StubTokenProvider(now=clock.now)


@pytest.fixture()
def token_cfg() -> AuthTokenConfig:
    return AuthTokenConfig(
        access_expires=timedelta(minutes=15), refresh_expires=timedelta(days=7), refresh_bytes=32
    )


@pytest.fixture()
def denylist() -> InMemoryDenylistStore:
    return InMemoryDenylistStore()


@pytest.fixture()
def analytics_sink() -> InMemoryAnalyticsSink:
    return InMemoryAnalyticsSink()


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
