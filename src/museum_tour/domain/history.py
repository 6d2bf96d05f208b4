"""Domain models for the tour history log."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from museum_tour.domain.tour import TourItem


class SyncStatus(StrEnum):
    """Synchronization state of a saved tour."""

    LOCAL = "local"
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"


@dataclass(frozen=True)
class Coordinates:
    """Geographic position where a tour took place."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class CreatePersistedTourParams:
    """Caller-supplied fields for a new history entry."""

    title: str
    description: str
    hero_image_uri: str
    museum_name: str
    session_id: str
    feed_items: list[TourItem]
    museum_id: str | None = None
    coordinates: Coordinates | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class PersistedTour:
    """A finished tour saved to the history log."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    title: str
    description: str
    hero_image_uri: str
    museum_id: str | None
    museum_name: str
    coordinates: Coordinates | None
    feed_items: list[TourItem]
    user_id: str | None
    session_id: str
    is_shared: bool = False
    is_official: bool = False
    community_rating: float = 0.0
    rating_count: int = 0
    sync_status: SyncStatus = SyncStatus.LOCAL
