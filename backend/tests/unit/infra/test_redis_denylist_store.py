"""Redis-backed access token denylist, exercised against fakeredis."""

from __future__ import annotations

from datetime import timedelta

import fakeredis
import pytest

from adgate.core.clock import utcnow
from adgate.infra.redis.redis_denylist_store import RedisTokenDenylistStore


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis()


@pytest.fixture()
def store(redis_client) -> RedisTokenDenylistStore:
    return RedisTokenDenylistStore(redis_client)


def test_unknown_jti_is_not_revoked(store):
    assert store.is_revoked("never-issued") is False


def test_revoked_jti_is_reported(store, redis_client):
    store.revoke_jti(jti="abc", expires_at=utcnow() + timedelta(minutes=10))

    assert store.is_revoked("abc") is True
    assert redis_client.exists("deny:at:abc") == 1


def test_marker_ttl_tracks_token_lifetime(store, redis_client):
    store.revoke_jti(jti="abc", expires_at=utcnow() + timedelta(minutes=10))

    ttl = redis_client.ttl("deny:at:abc")
    assert 590 <= ttl <= 600


def test_already_expired_token_gets_minimal_ttl(store, redis_client):
    store.revoke_jti(jti="old", expires_at=utcnow() - timedelta(minutes=5))

    assert redis_client.ttl("deny:at:old") == 1
    assert store.is_revoked("old") is True


def test_revocation_is_idempotent(store, redis_client):
    expires = utcnow() + timedelta(minutes=1)
    store.revoke_jti(jti="dup", expires_at=expires)
    store.revoke_jti(jti="dup", expires_at=expires)

    assert redis_client.keys("deny:at:*") == [b"deny:at:dup"]


def test_custom_prefix(redis_client):
    store = RedisTokenDenylistStore(redis_client, prefix="t:")
    store.revoke_jti(jti="x", expires_at=utcnow() + timedelta(minutes=1))

    assert redis_client.exists("t:x") == 1
    assert store.is_revoked("x") is True
