from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from adgate.models.enums import AdAction, AdType


@dataclass(frozen=True, slots=True)
class AdEvent:
    """
    One ad interaction to append.

    :param user_id: Reporting user, ``None`` for anonymous clients.
    :type user_id: int | None
    :param ad_type: Placement format.
    :type ad_type: AdType
    :param action: Reported interaction.
    :type action: AdAction
    :param ad_network_id: Network the placement came from.
    :type ad_network_id: str
    :param timestamp: Event time (UTC).
    :type timestamp: datetime
    """

    user_id: int | None
    ad_type: AdType
    action: AdAction
    ad_network_id: str
    timestamp: datetime


class AnalyticsSink(Protocol):
    """Append-only destination for ad interaction events."""

    def append(self, event: AdEvent) -> None: ...


class InMemoryAnalyticsSink(AnalyticsSink):
    """Collects events in a list; ``fail_with`` makes every append raise."""

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.events: list[AdEvent] = []
        self.fail_with = fail_with
        self._lock = threading.Lock()

    def append(self, event: AdEvent) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.events.append(event)
