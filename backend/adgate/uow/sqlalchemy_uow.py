"""
Units of work over the Flask-SQLAlchemy scoped session.

The writer commits on a clean exit and rolls back otherwise. The reader never
commits: it refuses ORM flushes of pending changes and any DML/DDL statement
for as long as it is open.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from adgate.core.extensions import db
from adgate.repositories import (
    AdConfigRepository,
    AdEventRepository,
    RefreshLedgerRepository,
    SessionRepository,
    UserRepository,
)
from adgate.uow.base import UnitOfWork

log = logging.getLogger(__name__)

_WRITE_VERBS = ("insert", "update", "delete", "replace", "create", "alter", "drop", "truncate")
_READ_ONLY_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Every repository bound to one session.

    Units of work pass the concrete :class:`Session` behind ``db.session``;
    the scoped proxy does not expose ``in_transaction()`` and would register
    event listeners on every session it hands out.
    """

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.sessions = SessionRepository(session=session)
        self.refresh_tokens = RefreshLedgerRepository(session=session)
        self.ad_configs = AdConfigRepository(session=session)
        self.ad_events = AdEventRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write scope.

    A login Session row and its refresh ledger entry written inside one scope
    are committed or discarded together.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """Session and connection listeners rejecting writes while installed."""

    def __init__(self, session: Session, conn: Connection) -> None:
        self.session = session
        self.conn = conn

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked")

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        verb = (statement or "").lstrip().split(None, 1)[:1]
        if verb and verb[0].lower().startswith(_WRITE_VERBS):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb[0].upper()}")

    def install(self) -> None:
        event.listen(self.session, "before_flush", self._before_flush)
        event.listen(self.conn, "before_cursor_execute", self._before_cursor_execute)

    def remove(self) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._before_flush)
        with suppress(InvalidRequestError):
            event.remove(self.conn, "before_cursor_execute", self._before_cursor_execute)


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope.

    When the session is idle the scope opens (and finally rolls back) its own
    transaction, flagged ``READ ONLY`` on dialects that support it. When a
    transaction is already running (request autobegin, test fixtures) the
    scope joins it and relies on the write guard alone.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=db.session())
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        if not self.session.in_transaction():
            self._owned = self.session.begin()

        conn = self.session.connection()
        self._guard = _WriteGuard(self.session, conn)
        self._guard.install()

        if self._owned is not None and self.enforce_db_readonly:
            self._flag_read_only(conn)
        return self

    def _flag_read_only(self, conn: Connection) -> None:
        if conn.dialect.name not in _READ_ONLY_DIALECTS:
            return
        try:
            self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("uow.read_only_flag_failed: %s", exc.__class__.__name__)

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self._owned.rollback()
        finally:
            self._owned = None
            if self._guard is not None:
                self._guard.remove()
                self._guard = None

    def commit(self) -> None:
        """
        :raises RuntimeError: always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
