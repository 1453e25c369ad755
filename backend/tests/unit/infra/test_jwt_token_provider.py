"""flask-jwt-extended adapter behind the token provider port."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from adgate.infra.jwt.flask_jwt_token_provider import JWTTokenProvider


@pytest.fixture()
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_subject_is_encoded_as_string(provider):
    token = provider.create_access_token(identity=42)

    claims = provider.decode(token)
    assert claims["sub"] == "42"
    assert claims["type"] == "access"


def test_caller_supplied_jti_is_kept(provider):
    token = provider.create_access_token(identity=1, jti="fixed-jti")

    assert provider.get_jti(token) == "fixed-jti"


def test_generated_jti_when_none_given(provider):
    first = provider.create_access_token(identity=1)
    second = provider.create_access_token(identity=1)

    assert provider.get_jti(first) != provider.get_jti(second)


def test_additional_claims_round_trip(provider):
    token = provider.create_access_token(
        identity=7,
        additional_claims={"sid": "chain-1", "subscription_state": "FREE"},
    )

    claims = provider.decode(token)
    assert claims["sid"] == "chain-1"
    assert claims["subscription_state"] == "FREE"


def test_expiry_follows_requested_delta(provider):
    before = datetime.now(tz=UTC)
    token = provider.create_access_token(identity=1, expires_delta=timedelta(minutes=5))

    expires_at = provider.get_expires_at(token)
    assert expires_at.tzinfo is not None
    assert before + timedelta(minutes=4) < expires_at <= before + timedelta(minutes=5, seconds=1)
