"""Supabase-backed tour history repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from museum_tour.domain.history import (
    Coordinates,
    CreatePersistedTourParams,
    PersistedTour,
    SyncStatus,
)
from museum_tour.domain.tour import FeedItemMetadata, FeedItemStatus, TourItem
from museum_tour.services.history import HistoryRepository

_COLUMNS = (
    "id, created_at, updated_at, title, description, hero_image_uri, museum_id, "
    "museum_name, coordinates, feed_items, user_id, session_id, is_shared, "
    "is_official, community_rating, rating_count, sync_status"
)


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase implementation for saved tours."""

    client: Client

    def save_tour(self, params: CreatePersistedTourParams) -> UUID:
        """Insert a tour row and return its id."""
        response = (
            self.client.table("tours")
            .insert(
                {
                    "title": params.title,
                    "description": params.description,
                    "hero_image_uri": params.hero_image_uri,
                    "museum_id": params.museum_id,
                    "museum_name": params.museum_name,
                    "coordinates": _coordinates_to_json(params.coordinates),
                    "feed_items": [_item_to_json(item) for item in params.feed_items],
                    "user_id": params.user_id,
                    "session_id": params.session_id,
                    "sync_status": SyncStatus.LOCAL.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save tour")
        return UUID(response.data[0]["id"])

    def update_tour(self, tour_id: UUID, updates: dict[str, object]) -> None:
        """Update tour fields and bump updated_at."""
        payload = dict(updates)
        if "feed_items" in payload:
            payload["feed_items"] = [
                _item_to_json(item) for item in payload["feed_items"]
            ]
        if "coordinates" in payload:
            payload["coordinates"] = _coordinates_to_json(payload["coordinates"])
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.client.table("tours").update(payload).eq("id", str(tour_id)).execute()

    def get_tour(self, tour_id: UUID) -> PersistedTour | None:
        """Return a tour by id, if present."""
        response = (
            self.client.table("tours")
            .select(_COLUMNS)
            .eq("id", str(tour_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_tour(response.data[0])

    def list_tours(self) -> list[PersistedTour]:
        """Return all tours, newest first."""
        response = (
            self.client.table("tours")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_row_to_tour(row) for row in response.data or []]

    def delete_tour(self, tour_id: UUID) -> None:
        """Delete a tour row."""
        self.client.table("tours").delete().eq("id", str(tour_id)).execute()


def _coordinates_to_json(coordinates: Coordinates | None) -> dict[str, float] | None:
    if coordinates is None:
        return None
    return {"latitude": coordinates.latitude, "longitude": coordinates.longitude}


def _item_to_json(item: TourItem) -> dict[str, object]:
    """Serialize a tour item; streamed audio fragments are not kept."""
    return {
        "id": str(item.id),
        "photos": list(item.photos),
        "status": item.status.value,
        "created_at": item.created_at.isoformat(),
        "metadata": (
            item.metadata.model_dump(exclude_none=True) if item.metadata else None
        ),
        "object_id": item.object_id,
        "recognition_confidence": item.recognition_confidence,
        "narrative_text": item.narrative_text,
        "audio_stream_progress": item.audio_stream_progress,
        "audio_url": item.audio_url,
        "audio_duration": item.audio_duration,
        "error": item.error,
    }


def _item_from_json(raw: dict[str, object]) -> TourItem:
    metadata = raw.get("metadata")
    return TourItem(
        id=UUID(str(raw["id"])),
        photos=tuple(raw.get("photos") or ()),
        status=FeedItemStatus(raw["status"]),
        created_at=datetime.fromisoformat(str(raw["created_at"])),
        metadata=FeedItemMetadata.model_validate(metadata) if metadata else None,
        object_id=raw.get("object_id"),
        recognition_confidence=raw.get("recognition_confidence"),
        narrative_text=raw.get("narrative_text"),
        audio_stream_progress=raw.get("audio_stream_progress"),
        audio_url=raw.get("audio_url"),
        audio_duration=raw.get("audio_duration"),
        error=raw.get("error"),
    )


def _row_to_tour(row: dict[str, object]) -> PersistedTour:
    coordinates = row.get("coordinates")
    return PersistedTour(
        id=UUID(str(row["id"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
        title=str(row["title"]),
        description=str(row.get("description") or ""),
        hero_image_uri=str(row.get("hero_image_uri") or ""),
        museum_id=row.get("museum_id"),
        museum_name=str(row["museum_name"]),
        coordinates=(
            Coordinates(
                latitude=float(coordinates["latitude"]),
                longitude=float(coordinates["longitude"]),
            )
            if isinstance(coordinates, dict)
            else None
        ),
        feed_items=[_item_from_json(item) for item in row.get("feed_items") or []],
        user_id=row.get("user_id"),
        session_id=str(row["session_id"]),
        is_shared=bool(row.get("is_shared", False)),
        is_official=bool(row.get("is_official", False)),
        community_rating=float(row.get("community_rating") or 0.0),
        rating_count=int(row.get("rating_count") or 0),
        sync_status=SyncStatus(row.get("sync_status") or SyncStatus.LOCAL.value),
    )
