"""SQLAlchemy repositories, one per aggregate."""

from __future__ import annotations

from adgate.repositories.ad import AdConfigRepository, AdEventRepository
from adgate.repositories.base import BaseRepository, apply_sorting
from adgate.repositories.session import RefreshLedgerRepository, SessionRepository
from adgate.repositories.user import UserRepository

__all__ = [
    "AdConfigRepository",
    "AdEventRepository",
    "BaseRepository",
    "RefreshLedgerRepository",
    "SessionRepository",
    "UserRepository",
    "apply_sorting",
]
