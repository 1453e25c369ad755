"""Unit tests for UserRepository."""

from __future__ import annotations

import pytest

from adgate.models import SubscriptionState
from adgate.repositories import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_create_inserts_free_unverified_user(self, repo):
        user = repo.create(
            email="New@Example.com",
            nickname="newbie",
            password="Passw0rd!",
            verification_token="tok-1",
        )
        assert user.id is not None
        assert user.email == "new@example.com"
        assert user.is_verified is False
        assert user.subscription_state is SubscriptionState.FREE
        assert user.verify_password("Passw0rd!")

    def test_create_federated_without_password(self, repo):
        user = repo.create(
            email="fed@example.com", nickname="fed", external_identity_id="google|42"
        )
        assert user.password_hash is None

    def test_get_by_email_is_case_insensitive(self, repo):
        u = UserFactory(email="alice@example.com")
        fetched = repo.get_by_email("  ALICE@example.com ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_exists_by_email(self, repo):
        UserFactory(email="bob@example.com")
        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_get_by_verification_token(self, repo):
        u = UserFactory(verification_token="verify-me")
        assert repo.get_by_verification_token("verify-me").id == u.id
        assert repo.get_by_verification_token("other") is None
        assert repo.get_by_verification_token("") is None

    def test_authenticate_valid_and_invalid(self, repo):
        UserFactory(email="auth@example.com", password="strongpass")
        assert repo.authenticate("auth@example.com", "strongpass") is not None
        assert repo.authenticate("auth@example.com", "wrongpass") is None
        assert repo.authenticate("nope@example.com", "strongpass") is None

    def test_update_only_whitelisted_fields(self, repo):
        u = UserFactory(is_verified=False, verification_token="t")
        repo.update(u, is_verified=True, verification_token=None)
        assert u.is_verified is True
        assert u.verification_token is None

        with pytest.raises(ValueError):
            repo.update(u, subscription_state=SubscriptionState.LIFETIME)
