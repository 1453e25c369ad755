"""Tiny helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any

from adgate.models.enums import SubscriptionState
from adgate.uow.memory import InMemoryStore, InMemoryUnitOfWork


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def add_user(
    store: InMemoryStore,
    *,
    email: str = "member@example.com",
    password: str = "Passw0rd!",
    state: SubscriptionState = SubscriptionState.FREE,
    expiry: Any = None,
    verified: bool = True,
):
    """Insert a user straight into an in-memory store and return it."""
    with InMemoryUnitOfWork(store) as uow:
        user = uow.users.create(email=email, nickname=email.split("@")[0], password=password)
        uow.users.update(
            user, is_verified=verified, subscription_state=state, subscription_expiry=expiry
        )
    return store.users[user.id]
