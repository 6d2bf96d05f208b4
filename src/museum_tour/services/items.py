"""In-memory store of tour items for the current tour session."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, fields, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from museum_tour.domain.tour import (
    FeedItemMetadata,
    FeedItemStatus,
    TourItem,
    can_transition,
)

_IMMUTABLE_FIELDS = frozenset({"id", "photos", "created_at"})
_MUTABLE_FIELDS = frozenset(
    field.name for field in fields(TourItem) if field.name not in _IMMUTABLE_FIELDS
)

_logger = logging.getLogger(__name__)


@dataclass
class ItemStore:
    """Keyed collection of tour items plus an advisory busy flag.

    Every operation is synchronous, so under a single event loop no other task
    can observe an item between the start and end of a write. Items are frozen
    and each write swaps in a new instance.
    """

    _items: dict[UUID, TourItem]
    _busy: bool

    def __init__(self) -> None:
        self._items = {}
        self._busy = False

    def create(
        self, photos: Sequence[str], metadata: FeedItemMetadata | None = None
    ) -> UUID:
        """Insert a new uploading item and return its id."""
        item = TourItem(
            id=uuid4(),
            photos=tuple(photos),
            metadata=metadata,
            status=FeedItemStatus.UPLOADING,
            created_at=datetime.now(tz=UTC),
        )
        self._items[item.id] = item
        _logger.debug("Created tour item %s with %s photos", item.id, len(photos))
        return item.id

    def get(self, item_id: UUID) -> TourItem | None:
        """Return an item by id, if present."""
        return self._items.get(item_id)

    def update(self, item_id: UUID, **changes: object) -> bool:
        """Merge changes into an item; return whether anything was applied.

        Missing ids, finished items and disallowed status moves are ignored.
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update tour item fields: {sorted(unknown)}")

        item = self._items.get(item_id)
        if item is None:
            _logger.debug("Ignoring update for missing tour item %s", item_id)
            return False
        if not item.is_pending:
            _logger.warning(
                "Ignoring update for finished tour item %s (%s)", item_id, item.status
            )
            return False

        target = item.status
        if "status" in changes:
            target = FeedItemStatus(changes["status"])
            if not can_transition(item.status, target):
                _logger.warning(
                    "Rejected status change for tour item %s: %s -> %s",
                    item_id,
                    item.status,
                    target,
                )
                return False
            changes["status"] = target

        if target is FeedItemStatus.ERROR:
            if not changes.get("error"):
                raise ValueError("An error status requires an error message")
        elif changes.get("error") is not None:
            raise ValueError("Error messages are only allowed with the error status")
        if target is FeedItemStatus.READY:
            changes["error"] = None

        if "audio_chunks" in changes and changes["audio_chunks"] is not None:
            changes["audio_chunks"] = tuple(changes["audio_chunks"])

        self._items[item_id] = replace(item, **changes)
        return True

    def append_audio_chunk(self, item_id: UUID, payload: str, progress: float) -> bool:
        """Append one audio fragment and raise progress, never lowering it."""
        item = self._items.get(item_id)
        if item is None:
            _logger.debug("Ignoring audio chunk for missing tour item %s", item_id)
            return False
        if not item.is_pending:
            return False
        chunks = (*(item.audio_chunks or ()), payload)
        current = item.audio_stream_progress or 0.0
        self._items[item_id] = replace(
            item,
            audio_chunks=chunks,
            audio_stream_progress=max(current, progress),
        )
        return True

    def items(self) -> list[TourItem]:
        """Return all items in creation order."""
        return list(self._items.values())

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def has_active_tour(self) -> bool:
        return bool(self._items)

    @property
    def has_pending_items(self) -> bool:
        """Whether any item is still being worked on."""
        return any(item.is_pending for item in self._items.values())

    @property
    def busy(self) -> bool:
        return self._busy

    def set_busy(self, busy: bool) -> None:
        """Set the advisory busy flag; it does not block anything."""
        self._busy = busy

    def reset(self) -> None:
        """Drop every item and clear the busy flag."""
        self._items = {}
        self._busy = False
