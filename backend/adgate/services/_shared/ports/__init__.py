"""
adgate.services._shared.ports
=============================

*Ports* (hexagonal interfaces) the service layer depends on, each shipped
with an in-memory implementation for unit tests.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider`, minting and decoding access credentials.

- :mod:`denylist_store`:
    :class:`~.TokenDenylistStore`, early revocation of access credentials.

- :mod:`analytics_sink`:
    :class:`~.AnalyticsSink`, append-only ad interaction events.

Concrete adapters (flask-jwt-extended, Redis, SQLAlchemy) live under
``adgate.infra``.
"""

from __future__ import annotations

from .analytics_sink import AdEvent, AnalyticsSink, InMemoryAnalyticsSink
from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "AdEvent",
    "AnalyticsSink",
    "InMemoryAnalyticsSink",
    "InMemoryDenylistStore",
    "StubTokenProvider",
    "TokenDenylistStore",
    "TokenProvider",
]
