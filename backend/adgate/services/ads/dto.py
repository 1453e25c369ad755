from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from adgate.models.enums import AdAction, AdType

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AdConfigUpsertIn:
    """
    Create-or-update payload keyed on ``(ad_type, ad_network_id)``.

    Omitted optional fields fall back to their defaults on both insert and
    update.

    :param ad_type: Placement format.
    :type ad_type: AdType
    :param ad_network_id: Network identifier.
    :type ad_network_id: str
    :param is_active: Whether the placement is servable.
    :type is_active: bool | None
    :param display_frequency: Advisory display frequency (>= 1).
    :type display_frequency: int | None
    """

    ad_type: AdType
    ad_network_id: str
    is_active: bool | None = None
    display_frequency: int | None = None


@dataclass(frozen=True, slots=True)
class TrackEventIn:
    """
    Client-reported ad interaction.

    :param user_id: Reporting user, ``None`` for anonymous clients.
    :param ad_type: Placement format.
    :param action: Interaction kind.
    :param ad_network_id: Network of the served placement.
    """

    user_id: int | None
    ad_type: AdType
    action: AdAction
    ad_network_id: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AdPlacementOut:
    """
    Placement handed to the client.

    :param id: Config id.
    :param ad_type: Placement format.
    :param ad_network_id: Network the client should load from.
    :param display_frequency: Advisory only; the selector does not weight on it.
    """

    id: int
    ad_type: AdType
    ad_network_id: str
    display_frequency: int


@dataclass(frozen=True, slots=True)
class AdConfigOut:
    id: int
    ad_type: AdType
    ad_network_id: str
    is_active: bool
    display_frequency: int
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True, slots=True)
class AnalyticsRowOut:
    """
    One aggregated analytics bucket.

    :param ad_type: Placement format.
    :param action: Interaction kind.
    :param count: Number of events in the window.
    """

    ad_type: AdType
    action: AdAction
    count: int
