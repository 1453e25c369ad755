"""Factory Boy definitions for login sessions and refresh ledger entries."""

from __future__ import annotations

from datetime import timedelta

import factory

from adgate.core.clock import utcnow
from adgate.models import LoginSession, RefreshLedgerEntry, RefreshTokenStatus
from adgate.services.auth.credentials import hash_jti, new_identifier, new_refresh_token
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class LoginSessionFactory(BaseFactory):
    class Meta:
        model = LoginSession

    id = None
    user = factory.SubFactory(UserFactory)
    user_id = factory.SelfAttribute("user.id")
    chain_id = factory.LazyFunction(new_identifier)
    access_token_hash = factory.LazyFunction(lambda: hash_jti(new_identifier()))
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        kwargs.pop("user", None)
        return super()._create(model_class, *args, **kwargs)


class RefreshEntryFactory(BaseFactory):
    """Ledger entry; pass ``session=`` to attach it to an existing chain."""

    class Meta:
        model = RefreshLedgerEntry

    id = None
    session = factory.SubFactory(LoginSessionFactory)
    token = factory.LazyFunction(lambda: new_refresh_token(32))
    user_id = factory.SelfAttribute("session.user_id")
    chain_id = factory.SelfAttribute("session.chain_id")
    status = RefreshTokenStatus.LIVE
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        kwargs.pop("session", None)
        return super()._create(model_class, *args, **kwargs)
