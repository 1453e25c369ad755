"""Credential issuance: one session plus one refresh entry, atomically."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from adgate.services._shared.errors import InvalidCredentials, PersistenceError
from adgate.services.auth.credentials import hash_jti
from adgate.services.auth.issuer import CredentialIssuer
from tests.helpers.utils import add_user


@pytest.fixture()
def issuer(uow_factory, token_provider, token_cfg, clock) -> CredentialIssuer:
    return CredentialIssuer(
        token_provider=token_provider, token_cfg=token_cfg, uow_factory=uow_factory, clock=clock
    )


def test_issue_opens_one_session_and_one_live_entry(issuer, store, token_provider, clock):
    user = add_user(store)

    pair = issuer.issue(user.id)

    assert pair.token_type == "Bearer"
    [session_row] = store.sessions.values()
    [entry] = store.refresh_tokens.values()
    assert entry.token == pair.refresh_token
    assert entry.chain_id == session_row.chain_id
    assert entry.user_id == session_row.user_id == user.id
    assert entry.parent_id is None
    assert entry.created_at == session_row.created_at == clock.now
    assert entry.expires_at == session_row.expires_at == clock.now + issuer.cfg.refresh_expires
    assert session_row.access_token_hash == hash_jti(token_provider.get_jti(pair.access_token))


def test_access_claims_carry_identity_entitlement_and_session(issuer, store, token_provider):
    user = add_user(store, email="claims@example.com")

    pair = issuer.issue(user.id)
    claims = token_provider.decode(pair.access_token)

    assert claims["sub"] == str(user.id)
    assert claims["email"] == "claims@example.com"
    assert claims["is_verified"] is True
    assert claims["subscription_state"] == "FREE"
    assert claims["sid"] == next(iter(store.sessions.values())).chain_id


def test_each_issue_starts_a_new_chain(issuer, store):
    user = add_user(store)
    first = issuer.issue(user.id)
    second = issuer.issue(user.id)

    assert first.refresh_token != second.refresh_token
    assert len({s.chain_id for s in store.sessions.values()}) == 2


def test_unknown_user_is_rejected_without_writes(issuer, store):
    with pytest.raises(InvalidCredentials):
        issuer.issue(999)
    assert store.sessions == {}
    assert store.refresh_tokens == {}


def test_ledger_failure_leaves_no_orphan_session(issuer, store):
    user = add_user(store)
    store.fail_on["refresh_tokens"] = OperationalError("INSERT", {}, Exception("disk full"))

    with pytest.raises(PersistenceError):
        issuer.issue(user.id)

    assert store.sessions == {}
    assert store.refresh_tokens == {}


def test_session_failure_leaves_no_orphan_entry(issuer, store):
    user = add_user(store)
    store.fail_on["sessions"] = OperationalError("INSERT", {}, Exception("disk full"))

    with pytest.raises(PersistenceError):
        issuer.issue(user.id)

    assert store.sessions == {}
    assert store.refresh_tokens == {}
