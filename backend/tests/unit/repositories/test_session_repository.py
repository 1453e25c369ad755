"""Unit tests for SessionRepository and RefreshLedgerRepository."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from adgate.core.clock import utcnow
from adgate.models import LoginSession, RefreshLedgerEntry, RefreshTokenStatus
from adgate.repositories import RefreshLedgerRepository, SessionRepository
from tests.factories.session import LoginSessionFactory, RefreshEntryFactory
from tests.factories.user import UserFactory


def _live(ledger, chain_id):
    return ledger.list(filters={"chain_id": chain_id, "status": RefreshTokenStatus.LIVE})


@pytest.fixture()
def sessions(session):
    return SessionRepository(session=session)


@pytest.fixture()
def ledger(session):
    return RefreshLedgerRepository(session=session)


class TestSessionRepository:
    def test_create_and_get_by_chain(self, sessions):
        user = UserFactory()
        now = utcnow()
        row = sessions.create(
            user_id=user.id,
            chain_id="c" * 32,
            access_token_hash="h" * 64,
            expires_at=now + timedelta(days=7),
            created_at=now,
        )
        assert row.id is not None
        assert sessions.get_by_chain("c" * 32).id == row.id
        assert sessions.get_by_chain("missing") is None

    def test_chain_id_unique(self, sessions):
        existing = LoginSessionFactory()
        with pytest.raises(IntegrityError):
            sessions.create(
                user_id=existing.user_id,
                chain_id=existing.chain_id,
                access_token_hash="x" * 64,
                expires_at=utcnow(),
                created_at=utcnow(),
            )

    def test_rebind_replaces_hash_and_expiry(self, sessions):
        row = LoginSessionFactory()
        later = utcnow() + timedelta(days=10)
        sessions.rebind(row, access_token_hash="n" * 64, expires_at=later)
        assert row.access_token_hash == "n" * 64

    def test_delete_by_chain_and_all_for_user(self, sessions, session):
        user = UserFactory()
        a = LoginSessionFactory(user=user)
        LoginSessionFactory(user=user)
        other = LoginSessionFactory()

        assert sessions.delete_by_chain(a.chain_id) == 1
        assert len(sessions.list(filters={"user_id": user.id})) == 1

        assert sessions.delete_all_for_user(user.id) == 1
        assert sessions.list(filters={"user_id": user.id}) == []
        assert session.get(LoginSession, other.id) is not None


class TestRefreshLedgerRepository:
    def test_create_is_live(self, ledger):
        chain = LoginSessionFactory()
        entry = ledger.create(
            token="tok-live",
            user_id=chain.user_id,
            chain_id=chain.chain_id,
            expires_at=utcnow() + timedelta(days=7),
            created_at=utcnow(),
        )
        assert entry.status is RefreshTokenStatus.LIVE
        assert entry.parent_id is None
        assert ledger.find_by_token("tok-live").id == entry.id
        assert ledger.find_by_token("nope") is None

    def test_token_unique(self, ledger):
        entry = RefreshEntryFactory()
        with pytest.raises(IntegrityError):
            ledger.create(
                token=entry.token,
                user_id=entry.user_id,
                chain_id=entry.chain_id,
                expires_at=utcnow(),
                created_at=utcnow(),
            )

    def test_mark_spent_succeeds_exactly_once(self, ledger, session):
        entry = RefreshEntryFactory()
        at = utcnow()

        assert ledger.mark_spent(entry.id, spent_at=at) is True
        assert ledger.mark_spent(entry.id, spent_at=at) is False

        session.expire_all()
        reloaded = session.get(RefreshLedgerEntry, entry.id)
        assert reloaded.status is RefreshTokenStatus.SPENT
        assert reloaded.spent_at is not None

    def test_mark_spent_refuses_revoked(self, ledger):
        entry = RefreshEntryFactory(status=RefreshTokenStatus.REVOKED)
        assert ledger.mark_spent(entry.id, spent_at=utcnow()) is False

    def test_revoke_chain_only_touches_live_entries_of_that_chain(self, ledger, session):
        chain = LoginSessionFactory()
        live = RefreshEntryFactory(session=chain)
        spent = RefreshEntryFactory(session=chain, status=RefreshTokenStatus.SPENT)
        elsewhere = RefreshEntryFactory()

        assert ledger.revoke_chain(chain.chain_id) == 1

        session.expire_all()
        assert session.get(RefreshLedgerEntry, live.id).status is RefreshTokenStatus.REVOKED
        assert session.get(RefreshLedgerEntry, spent.id).status is RefreshTokenStatus.SPENT
        assert session.get(RefreshLedgerEntry, elsewhere.id).status is RefreshTokenStatus.LIVE

    def test_revoke_all_for_user(self, ledger):
        user = UserFactory()
        first = LoginSessionFactory(user=user)
        second = LoginSessionFactory(user=user)
        RefreshEntryFactory(session=first)
        RefreshEntryFactory(session=second)

        assert len(_live(ledger, first.chain_id)) == 1
        assert ledger.revoke_all_for_user(user.id) == 2
        assert len(_live(ledger, first.chain_id)) == 0
        assert len(_live(ledger, second.chain_id)) == 0

    def test_successor_links_parent(self, ledger):
        parent = RefreshEntryFactory()
        child = ledger.create(
            token="tok-child",
            user_id=parent.user_id,
            chain_id=parent.chain_id,
            parent_id=parent.id,
            expires_at=utcnow() + timedelta(days=7),
            created_at=utcnow(),
        )
        assert child.parent_id == parent.id
