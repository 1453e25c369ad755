"""Demo rows for local development: one account per entitlement branch and a
placement per ad type. Re-running updates the rows in place."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any, NamedTuple

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from adgate.core.clock import utcnow
from adgate.models import AdConfig, AdType, SubscriptionState, User

LOGGER = logging.getLogger(__name__)

DEMO_PASSWORD = "devPass123!"

Summary = dict[str, dict[str, int]]


class DemoUser(NamedTuple):
    email: str
    state: SubscriptionState
    # Relative to seeding time; negative means already lapsed.
    expiry_days: int | None = None


DEMO_USERS: tuple[DemoUser, ...] = (
    DemoUser("free.user@example.com", SubscriptionState.FREE),
    DemoUser("subscriber@example.com", SubscriptionState.SUBSCRIPTION_ACTIVE, 30),
    DemoUser("lapsed@example.com", SubscriptionState.SUBSCRIPTION_ACTIVE, -1),
    DemoUser("lifetime@example.com", SubscriptionState.LIFETIME),
)

DEMO_PLACEMENTS: tuple[tuple[AdType, str, int], ...] = (
    (AdType.BANNER, "ca-app-pub-demo/banner-home", 1),
    (AdType.INTERSTITIAL, "ca-app-pub-demo/interstitial-session", 3),
)


def _count(summary: Summary, table: str, created: bool) -> None:
    bucket = summary.setdefault(table, {"created": 0, "existing": 0})
    bucket["created" if created else "existing"] += 1


def seed_users(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Upsert verified demo accounts, all sharing :data:`DEMO_PASSWORD`."""
    session: Session = database.session
    summary: Summary = {}
    now = utcnow()
    with session.begin():
        for demo in DEMO_USERS:
            user = session.scalars(select(User).filter_by(email=demo.email)).one_or_none()
            created = user is None
            if user is None:
                user = User(email=demo.email, nickname=demo.email.split("@")[0])
                user.password = DEMO_PASSWORD
                session.add(user)
            user.is_verified = True
            user.subscription_state = demo.state
            user.subscription_expiry = (
                None if demo.expiry_days is None else now + timedelta(days=demo.expiry_days)
            )
            _count(summary, "users", created)
            if verbose:
                LOGGER.info("seed.user: %s state=%s", demo.email, demo.state.value)
    return summary


def seed_ad_configs(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Upsert an active placement per :data:`DEMO_PLACEMENTS` entry."""
    session: Session = database.session
    summary: Summary = {}
    with session.begin():
        for ad_type, network_id, frequency in DEMO_PLACEMENTS:
            stmt = select(AdConfig).filter_by(ad_type=ad_type, ad_network_id=network_id)
            config = session.scalars(stmt).one_or_none()
            created = config is None
            if config is None:
                config = AdConfig(ad_type=ad_type, ad_network_id=network_id, is_active=True)
                session.add(config)
            config.display_frequency = frequency
            _count(summary, "ad_configs", created)
            if verbose:
                LOGGER.info("seed.ad_config: %s %s", ad_type.value, network_id)
    return summary


SEEDERS: tuple[Callable[..., Summary], ...] = (seed_users, seed_ad_configs)


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Run every seeder and merge their per-table counters."""
    combined: Summary = {}
    for seeder in SEEDERS:
        for table, counts in seeder(database, verbose=verbose).items():
            bucket: dict[str, Any] = combined.setdefault(table, {"created": 0, "existing": 0})
            for key, value in counts.items():
                bucket[key] += value
    return combined


__all__ = ["DEMO_PASSWORD", "run_all", "seed_ad_configs", "seed_users"]
