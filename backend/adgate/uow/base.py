"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Provide repositories bound to the same transaction
      (``users``, ``sessions``, ``refresh_tokens``, ``ad_configs``, ``ad_events``).
    - Commit on success, rollback on error.
    """

    users: Any
    sessions: Any
    refresh_tokens: Any
    ad_configs: Any
    ad_events: Any

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...


#: Zero-argument callable returning a fresh Unit of Work.
UnitOfWorkFactory = Callable[[], UnitOfWork]
