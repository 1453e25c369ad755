"""Unit tests for the in-memory unit of work."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from adgate.core.clock import utcnow
from adgate.models import AdAction, AdType, RefreshTokenStatus
from adgate.uow import InMemoryUnitOfWork


def _open_chain(uow, *, user_id: int, chain_id: str, token: str):
    now = utcnow()
    uow.sessions.create(
        user_id=user_id,
        chain_id=chain_id,
        access_token_hash="h" * 64,
        expires_at=now + timedelta(days=7),
        created_at=now,
    )
    return uow.refresh_tokens.create(
        token=token,
        user_id=user_id,
        chain_id=chain_id,
        expires_at=now + timedelta(days=7),
        created_at=now,
    )


class TestInMemoryUnitOfWork:
    def test_commit_keeps_writes(self, store):
        with InMemoryUnitOfWork(store) as uow:
            user = uow.users.create(email="A@Example.com", nickname="a", password="pw")
        assert store.users[user.id].email == "a@example.com"

    def test_exception_restores_snapshot(self, store):
        with pytest.raises(RuntimeError), InMemoryUnitOfWork(store) as uow:
            uow.users.create(email="gone@example.com", nickname="gone")
            raise RuntimeError("boom")
        assert store.users == {}
        assert store.next_id == 1

    def test_injected_write_failure_rolls_back_earlier_writes(self, store):
        store.fail_on["refresh_tokens"] = RuntimeError("ledger down")
        with pytest.raises(RuntimeError, match="ledger down"), InMemoryUnitOfWork(store) as uow:
            _open_chain(uow, user_id=1, chain_id="c1", token="t1")
        assert store.sessions == {}
        assert store.refresh_tokens == {}

    def test_commit_failure_rolls_back(self, store):
        store.fail_on["commit"] = RuntimeError("commit lost")
        with pytest.raises(RuntimeError, match="commit lost"), InMemoryUnitOfWork(store) as uow:
            _open_chain(uow, user_id=1, chain_id="c1", token="t1")
        assert store.sessions == {}

    def test_duplicate_chain_rejected(self, store):
        with InMemoryUnitOfWork(store) as uow:
            _open_chain(uow, user_id=1, chain_id="c1", token="t1")
        with pytest.raises(ValueError), InMemoryUnitOfWork(store) as uow:
            _open_chain(uow, user_id=1, chain_id="c1", token="t2")

    def test_mark_spent_is_compare_and_set(self, store):
        with InMemoryUnitOfWork(store) as uow:
            entry = _open_chain(uow, user_id=1, chain_id="c1", token="t1")
        wins = []

        def spend():
            with InMemoryUnitOfWork(store) as uow:
                wins.append(uow.refresh_tokens.mark_spent(entry.id, spent_at=utcnow()))

        threads = [threading.Thread(target=spend) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert wins.count(True) == 1
        assert store.refresh_tokens[entry.id].status is RefreshTokenStatus.SPENT

    def test_aggregate_orders_by_type_then_action(self, store):
        with InMemoryUnitOfWork(store) as uow:
            for ad_type, action in [
                (AdType.INTERSTITIAL, AdAction.CLICK),
                (AdType.BANNER, AdAction.IMPRESSION),
                (AdType.BANNER, AdAction.CLICK),
                (AdType.BANNER, AdAction.CLICK),
            ]:
                uow.ad_events.create(
                    user_id=None, ad_type=ad_type, action=action, ad_network_id="n"
                )
            rows = uow.ad_events.aggregate()
        assert rows == [
            (AdType.BANNER, AdAction.CLICK, 2),
            (AdType.BANNER, AdAction.IMPRESSION, 1),
            (AdType.INTERSTITIAL, AdAction.CLICK, 1),
        ]
