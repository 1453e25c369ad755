"""Entitlement decision table and fail-closed lookups."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy.exc import OperationalError

from adgate.models import SubscriptionState
from adgate.services._shared.errors import EntitlementLookupFailure
from adgate.services.entitlements.gate import EntitlementGate, decide_restricted
from tests.factories.user import UserFactory
from tests.helpers.utils import add_user

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestDecisionTable:
    @pytest.mark.parametrize(
        ("state", "expiry", "restricted"),
        [
            (SubscriptionState.FREE, None, True),
            (SubscriptionState.FREE, NOW + timedelta(days=30), True),
            (SubscriptionState.LIFETIME, None, False),
            (SubscriptionState.LIFETIME, NOW - timedelta(days=30), False),
            (SubscriptionState.SUBSCRIPTION_ACTIVE, NOW + timedelta(days=1), False),
            (SubscriptionState.SUBSCRIPTION_ACTIVE, NOW + timedelta(microseconds=1), False),
            (SubscriptionState.SUBSCRIPTION_ACTIVE, NOW, True),
            (SubscriptionState.SUBSCRIPTION_ACTIVE, NOW - timedelta(seconds=1), True),
            (SubscriptionState.SUBSCRIPTION_ACTIVE, None, True),
        ],
    )
    def test_decide_restricted(self, state, expiry, restricted):
        assert decide_restricted(state, expiry, NOW) is restricted

    def test_naive_expiry_is_read_as_utc(self):
        naive = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        assert decide_restricted(SubscriptionState.SUBSCRIPTION_ACTIVE, naive, NOW) is False

    def test_unknown_state_is_a_lookup_failure(self):
        with pytest.raises(EntitlementLookupFailure):
            decide_restricted("TRIAL", None, NOW)  # type: ignore[arg-type]


class _BrokenUoW:
    def __enter__(self):
        raise OperationalError("SELECT", {}, Exception("db down"))

    def __exit__(self, *exc):
        return False


class _GuardedUoW:
    """Fails on entry with a non-database error, like a tripped write guard."""

    def __enter__(self):
        raise RuntimeError("Read-only UnitOfWork: ORM flush blocked")

    def __exit__(self, *exc):
        return False


class TestEntitlementGate:
    def test_unknown_user_is_restricted(self, uow_factory):
        assert EntitlementGate(uow_factory=uow_factory).is_restricted(404) is True

    def test_lifetime_user_is_not_restricted(self, store, uow_factory):
        user = add_user(store, state=SubscriptionState.LIFETIME)
        assert EntitlementGate(uow_factory=uow_factory).is_restricted(user.id, now=NOW) is False

    def test_subscription_ends_at_expiry_instant(self, store, uow_factory):
        user = add_user(store, state=SubscriptionState.SUBSCRIPTION_ACTIVE, expiry=NOW)
        gate = EntitlementGate(uow_factory=uow_factory)
        assert gate.is_restricted(user.id, now=NOW - timedelta(microseconds=1)) is False
        assert gate.is_restricted(user.id, now=NOW) is True

    def test_uses_service_clock_by_default(self, store, uow_factory):
        user = add_user(store, state=SubscriptionState.SUBSCRIPTION_ACTIVE, expiry=NOW)
        gate = EntitlementGate(uow_factory=uow_factory, clock=lambda: NOW - timedelta(hours=1))
        assert gate.is_restricted(user.id) is False

    def test_storage_failure_fails_closed(self, caplog):
        gate = EntitlementGate(uow_factory=_BrokenUoW)
        with caplog.at_level(logging.WARNING, logger="adgate.services.entitlements.gate"):
            assert gate.is_restricted(1) is True
        assert any("entitlements.lookup_failed" in r.getMessage() for r in caplog.records)

    def test_non_database_failure_fails_closed(self, caplog):
        gate = EntitlementGate(uow_factory=_GuardedUoW)
        with caplog.at_level(logging.WARNING, logger="adgate.services.entitlements.gate"):
            assert gate.is_restricted(1) is True
        assert any("RuntimeError" in r.getMessage() for r in caplog.records)

    def test_corrupt_state_fails_closed(self, store, uow_factory):
        user = add_user(store)
        store.users[user.id].subscription_state = "TRIAL"
        assert EntitlementGate(uow_factory=uow_factory).is_restricted(user.id) is True

    def test_snapshot_reports_show_ads(self, store):
        user = add_user(store, state=SubscriptionState.SUBSCRIPTION_ACTIVE, expiry=NOW)
        out = EntitlementGate().snapshot(user, now=NOW - timedelta(days=1))
        assert out.subscription_state is SubscriptionState.SUBSCRIPTION_ACTIVE
        assert out.subscription_expiry == NOW
        assert out.show_ads is False


class TestEntitlementGateSQL:
    """Same decisions through the SQLAlchemy units of work."""

    @freeze_time("2026-03-01 12:00:00")
    def test_sql_backed_decisions(self, session):
        free = UserFactory()
        subscribed = UserFactory(subscribed=True)
        lapsed = UserFactory(lapsed=True)
        lifetime = UserFactory(lifetime=True)
        gate = EntitlementGate()

        assert gate.is_restricted(free.id) is True
        assert gate.is_restricted(subscribed.id) is False
        assert gate.is_restricted(lapsed.id) is True
        assert gate.is_restricted(lifetime.id) is False
