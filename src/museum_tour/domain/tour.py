"""Domain models for tour items and their lifecycle."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class FeedItemStatus(StrEnum):
    """Lifecycle status of a tour item."""

    UPLOADING = "uploading"
    PROCESSING = "processing"
    GENERATING_NARRATIVE = "generating_narrative"
    GENERATING_AUDIO = "generating_audio"
    STREAMING_AUDIO = "streaming_audio"
    READY = "ready"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({FeedItemStatus.READY, FeedItemStatus.ERROR})

_TRANSITIONS: dict[FeedItemStatus, frozenset[FeedItemStatus]] = {
    FeedItemStatus.UPLOADING: frozenset(
        {
            FeedItemStatus.PROCESSING,
            FeedItemStatus.GENERATING_NARRATIVE,
            FeedItemStatus.GENERATING_AUDIO,
            FeedItemStatus.STREAMING_AUDIO,
            FeedItemStatus.READY,
            FeedItemStatus.ERROR,
        }
    ),
    FeedItemStatus.PROCESSING: frozenset(
        {
            FeedItemStatus.GENERATING_NARRATIVE,
            FeedItemStatus.GENERATING_AUDIO,
            FeedItemStatus.STREAMING_AUDIO,
            FeedItemStatus.READY,
            FeedItemStatus.ERROR,
        }
    ),
    FeedItemStatus.GENERATING_NARRATIVE: frozenset(
        {
            FeedItemStatus.GENERATING_AUDIO,
            FeedItemStatus.STREAMING_AUDIO,
            FeedItemStatus.READY,
            FeedItemStatus.ERROR,
        }
    ),
    FeedItemStatus.GENERATING_AUDIO: frozenset(
        {FeedItemStatus.READY, FeedItemStatus.ERROR}
    ),
    FeedItemStatus.STREAMING_AUDIO: frozenset(
        {FeedItemStatus.READY, FeedItemStatus.ERROR}
    ),
    FeedItemStatus.READY: frozenset(),
    FeedItemStatus.ERROR: frozenset(),
}

_STATUS_TEXT = {
    FeedItemStatus.UPLOADING: "Uploading photos...",
    FeedItemStatus.PROCESSING: "Processing...",
    FeedItemStatus.GENERATING_NARRATIVE: "Generating narrative...",
    FeedItemStatus.GENERATING_AUDIO: "Generating audio...",
    FeedItemStatus.STREAMING_AUDIO: "Streaming audio...",
    FeedItemStatus.READY: "Ready",
    FeedItemStatus.ERROR: "Error occurred",
}


class InvalidStatusTransition(ValueError):
    """Raised when a status change is not allowed by the lifecycle."""

    def __init__(self, current: FeedItemStatus, target: FeedItemStatus) -> None:
        super().__init__(f"Cannot move tour item from {current} to {target}")
        self.current = current
        self.target = target


class FeedItemMetadata(BaseModel):
    """Optional descriptive fields for a photographed object."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    artist: str | None = None
    year: str | None = None
    material: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class TourItem:
    """Generation progress of one photographed object."""

    id: UUID
    photos: tuple[str, ...]
    status: FeedItemStatus
    created_at: datetime
    metadata: FeedItemMetadata | None = None
    object_id: str | None = None
    recognition_confidence: float | None = None
    narrative_text: str | None = None
    audio_chunks: tuple[str, ...] | None = None
    audio_stream_progress: float | None = None
    audio_url: str | None = None
    audio_duration: float | None = None
    error: str | None = None

    @property
    def is_pending(self) -> bool:
        """Whether the item is still being worked on."""
        return is_pending(self.status)


def is_pending(status: FeedItemStatus) -> bool:
    """Return True for any non-terminal status."""
    return status not in TERMINAL_STATUSES


def can_transition(current: FeedItemStatus, target: FeedItemStatus) -> bool:
    """Return whether moving from current to target is allowed."""
    if current == target:
        return is_pending(current)
    return target in _TRANSITIONS[current]


def check_transition(current: FeedItemStatus, target: FeedItemStatus) -> None:
    """Raise InvalidStatusTransition if the move is not allowed."""
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)


def status_text(status: FeedItemStatus) -> str:
    """Human-readable label for a status."""
    return _STATUS_TEXT[FeedItemStatus(status)]
