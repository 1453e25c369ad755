"""
Unit tests for the SQLAlchemy units of work (writer and read-only).
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import text

from adgate.core.clock import utcnow
from adgate.models import LoginSession, RefreshLedgerEntry, User
from adgate.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_commits_on_success(self, db, session):
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.create(email="commit@example.com", nickname="commit", password="pw")

        assert db.session.query(User).count() == initial + 1

    def test_rolls_back_on_exception(self, db, session):
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.create(email="boom@example.com", nickname="boom", password="pw")
            raise RuntimeError("boom")

        assert db.session.query(User).count() == initial

    def test_session_and_ledger_share_the_transaction(self, db, session):
        user = UserFactory()
        session.commit()
        now = utcnow()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.sessions.create(
                user_id=user.id,
                chain_id="a" * 32,
                access_token_hash="h" * 64,
                expires_at=now + timedelta(days=7),
                created_at=now,
            )
            uow.refresh_tokens.create(
                token="never-committed",
                user_id=user.id,
                chain_id="a" * 32,
                expires_at=now + timedelta(days=7),
                created_at=now,
            )
            raise RuntimeError("abort after both writes")

        assert db.session.query(LoginSession).filter_by(chain_id="a" * 32).count() == 0
        assert db.session.query(RefreshLedgerEntry).filter_by(token="never-committed").count() == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_opens_its_own_transaction_on_an_idle_session(self, db, session):
        idle = db.session()
        assert not idle.in_transaction()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.session is idle
            assert idle.in_transaction()
            assert uow.users.get_by_email("nobody@example.com") is None

        assert not idle.in_transaction()

    def test_factory_rows_are_readable_without_tripping_the_guard(self, db, session):
        user = UserFactory(email="clean@example.com", password="s3cret!")
        assert not session.dirty

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            found = uow.users.authenticate("clean@example.com", "s3cret!")

        assert found is not None and found.id == user.id

    def test_allows_reads(self, db, session):
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.create(email="reader@example.com", nickname="reader", password="pw")

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get_by_email("reader@example.com") is not None

    def test_blocks_orm_flush_writes(self, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(
            RuntimeError, match="ORM flush blocked"
        ):
            uow.session.add(User(email="ro@example.com", nickname="ro"))
            uow.session.flush()

    def test_blocks_core_dml(self, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(
            RuntimeError, match="SQL statement blocked"
        ):
            uow.session.execute(
                text("DELETE FROM ad_configs WHERE id = :id"), {"id": 0}
            )

    def test_disallows_commit(self, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(
            RuntimeError, match="does not allow commit"
        ):
            uow.commit()
