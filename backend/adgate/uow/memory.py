"""In-memory Unit of Work.

Mirrors the repository surface of :mod:`adgate.uow.sqlalchemy_uow` over plain
dataclass records. A process-wide lock is held for the whole unit, and the
store is snapshotted on entry so that ``rollback`` restores it exactly. Units
of work are therefore serializable, which makes this implementation suitable
for exercising atomicity and concurrent rotation without a database.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from adgate.core.clock import utcnow
from adgate.models.enums import AdAction, AdType, RefreshTokenStatus, SubscriptionState
from adgate.uow.base import UnitOfWork


@dataclass(slots=True)
class UserRecord:
    id: int
    email: str
    nickname: str
    password_hash: str | None = None
    external_identity_id: str | None = None
    is_verified: bool = False
    verification_token: str | None = None
    subscription_state: SubscriptionState = SubscriptionState.FREE
    subscription_expiry: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def verify_password(self, raw: str) -> bool:
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))


@dataclass(slots=True)
class SessionRecord:
    id: int
    user_id: int
    chain_id: str
    access_token_hash: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class LedgerRecord:
    id: int
    token: str
    user_id: int
    chain_id: str
    expires_at: datetime
    created_at: datetime
    parent_id: int | None = None
    status: RefreshTokenStatus = RefreshTokenStatus.LIVE
    spent_at: datetime | None = None


@dataclass(slots=True)
class AdConfigRecord:
    id: int
    ad_type: AdType
    ad_network_id: str
    is_active: bool = True
    display_frequency: int = 1
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class AdEventRecord:
    id: int
    user_id: int | None
    ad_type: AdType
    action: AdAction
    ad_network_id: str
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class InMemoryStore:
    """Tables of the in-memory backend, keyed by primary key."""

    users: dict[int, UserRecord] = field(default_factory=dict)
    sessions: dict[int, SessionRecord] = field(default_factory=dict)
    refresh_tokens: dict[int, LedgerRecord] = field(default_factory=dict)
    ad_configs: dict[int, AdConfigRecord] = field(default_factory=dict)
    ad_events: dict[int, AdEventRecord] = field(default_factory=dict)
    next_id: int = 1
    #: Set to an exception instance to make the next write of that table fail.
    fail_on: dict[str, Exception] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def allocate_id(self) -> int:
        value = self.next_id
        self.next_id += 1
        return value

    def check_failure(self, table: str) -> None:
        exc = self.fail_on.pop(table, None)
        if exc is not None:
            raise exc

    def snapshot(self) -> dict[str, Any]:
        return {
            "users": copy.deepcopy(self.users),
            "sessions": copy.deepcopy(self.sessions),
            "refresh_tokens": copy.deepcopy(self.refresh_tokens),
            "ad_configs": copy.deepcopy(self.ad_configs),
            "ad_events": copy.deepcopy(self.ad_events),
            "next_id": self.next_id,
        }

    def restore(self, snap: dict[str, Any]) -> None:
        self.users = snap["users"]
        self.sessions = snap["sessions"]
        self.refresh_tokens = snap["refresh_tokens"]
        self.ad_configs = snap["ad_configs"]
        self.ad_events = snap["ad_events"]
        self.next_id = snap["next_id"]


class _InMemoryRepository:
    table: str

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @property
    def rows(self) -> dict[int, Any]:
        return getattr(self._store, self.table)

    def get(self, entity_id: Any) -> Any:
        return self.rows.get(entity_id)

    def _insert(self, record: Any) -> Any:
        self._store.check_failure(self.table)
        self.rows[record.id] = record
        return record

    def flush(self) -> None:
        self._store.check_failure(self.table)


class InMemoryUserRepository(_InMemoryRepository):
    table = "users"

    def create(
        self,
        *,
        email: str,
        nickname: str,
        password: str | None = None,
        external_identity_id: str | None = None,
        verification_token: str | None = None,
    ) -> UserRecord:
        return self._insert(
            UserRecord(
                id=self._store.allocate_id(),
                email=email.strip().lower(),
                nickname=nickname.strip(),
                password_hash=generate_password_hash(password) if password else None,
                external_identity_id=external_identity_id,
                verification_token=verification_token,
            )
        )

    def get_by_email(self, email: str) -> UserRecord | None:
        key = email.strip().lower()
        return next((u for u in self.rows.values() if u.email == key), None)

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_by_verification_token(self, token: str) -> UserRecord | None:
        if not token:
            return None
        return next((u for u in self.rows.values() if u.verification_token == token), None)

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

    def update(self, instance: UserRecord, **fields: Any) -> UserRecord:
        self._store.check_failure(self.table)
        for k, v in fields.items():
            setattr(instance, k, v)
        instance.updated_at = utcnow()
        return instance


class InMemorySessionRepository(_InMemoryRepository):
    table = "sessions"

    def create(
        self,
        *,
        user_id: int,
        chain_id: str,
        access_token_hash: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> SessionRecord:
        if self.get_by_chain(chain_id) is not None:
            raise ValueError(f"duplicate chain_id {chain_id}")
        return self._insert(
            SessionRecord(
                id=self._store.allocate_id(),
                user_id=user_id,
                chain_id=chain_id,
                access_token_hash=access_token_hash,
                expires_at=expires_at,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    def get_by_chain(self, chain_id: str) -> SessionRecord | None:
        return next((s for s in self.rows.values() if s.chain_id == chain_id), None)

    def rebind(self, session_row: SessionRecord, *, access_token_hash: str, expires_at: datetime) -> None:
        self._store.check_failure(self.table)
        session_row.access_token_hash = access_token_hash
        session_row.expires_at = expires_at
        session_row.updated_at = utcnow()

    def delete_by_chain(self, chain_id: str) -> int:
        doomed = [k for k, s in self.rows.items() if s.chain_id == chain_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)

    def delete_all_for_user(self, user_id: int) -> int:
        doomed = [k for k, s in self.rows.items() if s.user_id == user_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class InMemoryRefreshLedgerRepository(_InMemoryRepository):
    table = "refresh_tokens"

    def create(
        self,
        *,
        token: str,
        user_id: int,
        chain_id: str,
        expires_at: datetime,
        created_at: datetime,
        parent_id: int | None = None,
    ) -> LedgerRecord:
        if self.find_by_token(token) is not None:
            raise ValueError("duplicate refresh token")
        return self._insert(
            LedgerRecord(
                id=self._store.allocate_id(),
                token=token,
                user_id=user_id,
                chain_id=chain_id,
                parent_id=parent_id,
                expires_at=expires_at,
                created_at=created_at,
            )
        )

    def find_by_token(self, token: str) -> LedgerRecord | None:
        return next((e for e in self.rows.values() if e.token == token), None)

    def list(self, *, filters: dict[str, Any] | None = None, **_: Any) -> list[LedgerRecord]:
        items = sorted(self.rows.values(), key=lambda e: e.id)
        for k, v in (filters or {}).items():
            items = [e for e in items if getattr(e, k) == v]
        return items

    def mark_spent(self, entry_id: int, *, spent_at: datetime) -> bool:
        self._store.check_failure(self.table)
        entry = self.rows.get(entry_id)
        if entry is None or entry.status is not RefreshTokenStatus.LIVE:
            return False
        entry.status = RefreshTokenStatus.SPENT
        entry.spent_at = spent_at
        return True

    def _revoke_where(self, **match: Any) -> int:
        count = 0
        for entry in self.rows.values():
            if entry.status is not RefreshTokenStatus.LIVE:
                continue
            if all(getattr(entry, k) == v for k, v in match.items()):
                entry.status = RefreshTokenStatus.REVOKED
                count += 1
        return count

    def revoke_chain(self, chain_id: str) -> int:
        return self._revoke_where(chain_id=chain_id)

    def revoke_all_for_user(self, user_id: int) -> int:
        return self._revoke_where(user_id=user_id)


class InMemoryAdConfigRepository(_InMemoryRepository):
    table = "ad_configs"

    def create(
        self,
        *,
        ad_type: AdType,
        ad_network_id: str,
        is_active: bool = True,
        display_frequency: int = 1,
    ) -> AdConfigRecord:
        return self._insert(
            AdConfigRecord(
                id=self._store.allocate_id(),
                ad_type=ad_type,
                ad_network_id=ad_network_id.strip(),
                is_active=is_active,
                display_frequency=display_frequency,
            )
        )

    def list_active(self, ad_type: AdType | None = None) -> list[AdConfigRecord]:
        items = [
            c
            for c in self.rows.values()
            if c.is_active and (ad_type is None or c.ad_type == ad_type)
        ]
        return sorted(items, key=lambda c: (c.created_at, c.id), reverse=True)

    def get_by_type_and_network(self, ad_type: AdType, ad_network_id: str) -> AdConfigRecord | None:
        key = ad_network_id.strip()
        return next(
            (c for c in self.rows.values() if c.ad_type == ad_type and c.ad_network_id == key),
            None,
        )

    def update(self, instance: AdConfigRecord, **fields: Any) -> AdConfigRecord:
        self._store.check_failure(self.table)
        for k, v in fields.items():
            setattr(instance, k, v)
        instance.updated_at = utcnow()
        return instance


class InMemoryAdEventRepository(_InMemoryRepository):
    table = "ad_events"

    def create(
        self,
        *,
        user_id: int | None,
        ad_type: AdType,
        action: AdAction,
        ad_network_id: str,
        timestamp: datetime | None = None,
    ) -> AdEventRecord:
        return self._insert(
            AdEventRecord(
                id=self._store.allocate_id(),
                user_id=user_id,
                ad_type=ad_type,
                action=action,
                ad_network_id=ad_network_id,
                timestamp=timestamp or utcnow(),
            )
        )

    def aggregate(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[tuple[Any, Any, int]]:
        counts: dict[tuple[Any, Any], int] = {}
        for e in self.rows.values():
            if start is not None and e.timestamp < start:
                continue
            if end is not None and e.timestamp > end:
                continue
            key = (e.ad_type, e.action)
            counts[key] = counts.get(key, 0) + 1
        return [
            (ad_type, action, n)
            for (ad_type, action), n in sorted(counts.items(), key=lambda kv: (kv[0][0].value, kv[0][1].value))
        ]


class InMemoryUnitOfWork(UnitOfWork):
    """Serializable Unit of Work over an :class:`InMemoryStore`."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._snapshot: dict[str, Any] | None = None
        self.users = InMemoryUserRepository(store)
        self.sessions = InMemorySessionRepository(store)
        self.refresh_tokens = InMemoryRefreshLedgerRepository(store)
        self.ad_configs = InMemoryAdConfigRepository(store)
        self.ad_events = InMemoryAdEventRepository(store)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._store.lock.acquire()
        self._snapshot = self._store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                try:
                    self.commit()
                except Exception:
                    self.rollback()
                    raise
            else:
                self.rollback()
        finally:
            self._snapshot = None
            self._store.lock.release()

    def commit(self) -> None:
        self._store.check_failure("commit")
        self._snapshot = self._store.snapshot()

    def rollback(self) -> None:
        if self._snapshot is not None:
            self._store.restore(self._snapshot)


def in_memory_uow_factory(store: InMemoryStore):
    """Return a zero-argument factory producing units of work over ``store``."""
    return lambda: InMemoryUnitOfWork(store)
