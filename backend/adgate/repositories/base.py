"""Shared plumbing for the SQLAlchemy 2.x repositories.

Repositories only read and stage rows; the Unit of Work owns commit and
rollback. Filtering, ordering and updates go through per-repository
whitelists so a caller-supplied key can never reach an arbitrary column.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from adgate.core.extensions import db

E = TypeVar("E")


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
    pk_desc: bool = False,
) -> Select[Any]:
    """Order ``stmt`` by whitelisted ``tokens`` (``"-field"`` means descending).

    Unknown tokens are skipped. ``pk_attr`` always comes last so rows with
    equal sort keys keep a deterministic order.
    """
    for token in tokens:
        descending = token.startswith("-")
        col = sortable_fields.get(token.lstrip("-").strip())
        if col is not None:
            stmt = stmt.order_by(col.desc() if descending else col.asc())
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.desc() if pk_desc else pk_attr.asc())
    return stmt


class BaseRepository(Generic[E]):
    """Single-model repository.

    Subclasses set ``model`` and may override the ``_sortable_fields``,
    ``_filterable_fields`` and ``_updatable_fields`` whitelists.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, else the Flask-scoped ``db.session``."""
        return self._session if self._session is not None else cast(Session, db.session)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            col = allowed.get(key)
            if col is not None:
                stmt = stmt.where(col == value)
        return stmt

    # --------------------------------- Reads ---------------------------------

    def get(self, entity_id: Any) -> E | None:
        return self.session.get(self.model, entity_id)

    def find_one(self, **filters: Any) -> E | None:
        """First row matching whitelisted equality ``filters``."""
        stmt = self._where(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
        limit: int | None = None,
    ) -> list[E]:
        """Rows matching ``filters``, ordered by ``sort`` then primary key."""
        stmt = self._where(select(self.model), filters)
        stmt = apply_sorting(
            stmt, self._sortable_fields(), sort or (), pk_attr=getattr(self.model, "id", None)
        )
        if limit is not None:
            stmt = stmt.limit(int(limit))
        return list(self.session.execute(stmt).scalars().all())

    # --------------------------------- Writes --------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated."""
        self.session.add(instance)
        self.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted ``fields`` and flush.

        Assignment goes through ``setattr`` so model ``@validates`` hooks run.

        :raises ValueError: On any key outside ``_updatable_fields()``.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()
