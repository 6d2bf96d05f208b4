"""Shared test fixtures."""

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from museum_tour.adapters.audio_client import AudioClient
from museum_tour.adapters.narrative_client import NarrativeClient
from museum_tour.adapters.photo_loader import PhotoLoader
from museum_tour.adapters.recognition_client import RecognitionClient
from museum_tour.config import Settings
from museum_tour.domain.chunks import (
    AudioChunk,
    CompleteChunk,
    MetadataChunk,
    NarrativeChunk,
    StreamChunk,
)
from museum_tour.domain.errors import IncompleteStreamError
from museum_tour.domain.history import CreatePersistedTourParams, PersistedTour
from museum_tour.domain.results import AudioResult, NarrativeResult, RecognitionResult
from museum_tour.domain.tour import FeedItemMetadata
from museum_tour.services.history import HistoryRepository, TourHistoryService
from museum_tour.services.items import ItemStore
from museum_tour.services.streaming import ChunkHandler
from museum_tour.services.submission import SubmissionOrchestrator


def happy_path_chunks(audio_url: str = "u") -> list[StreamChunk]:
    """Chunks of a short, well-formed audio stream."""
    return [
        MetadataChunk(format="mp3"),
        AudioChunk(sequence=1, data="a"),
        NarrativeChunk(text="hello"),
        AudioChunk(sequence=2, data="b"),
        CompleteChunk(audio_url=audio_url, duration=12),
    ]


@dataclass
class FakePhotoLoader(PhotoLoader):
    """Photo loader that returns the reference itself as bytes."""

    loaded: list[str] = field(default_factory=list)

    async def load(self, reference: str) -> bytes:
        self.loaded.append(reference)
        return reference.encode()


@dataclass
class FakeRecognitionClient(RecognitionClient):
    """Recognition client returning fixed results, keyed by first photo."""

    result: RecognitionResult = field(
        default_factory=lambda: RecognitionResult(
            object_id="o1", recognition_confidence=88
        )
    )
    by_photo: dict[str, RecognitionResult] = field(default_factory=dict)
    error: Exception | None = None
    calls: list[tuple[list[bytes], FeedItemMetadata | None]] = field(
        default_factory=list
    )

    async def process(
        self, photos: list[bytes], metadata: FeedItemMetadata | None = None
    ) -> RecognitionResult:
        self.calls.append((photos, metadata))
        if self.error is not None:
            raise self.error
        if photos and photos[0].decode() in self.by_photo:
            return self.by_photo[photos[0].decode()]
        return self.result


@dataclass
class FakeNarrativeClient(NarrativeClient):
    """Narrative client returning a fixed text."""

    text: str = "A painting of a quiet harbour at dawn."
    error: Exception | None = None
    calls: list[tuple[str, str | None]] = field(default_factory=list)

    async def generate(
        self, object_id: str, context: str | None = None
    ) -> NarrativeResult:
        self.calls.append((object_id, context))
        if self.error is not None:
            raise self.error
        return NarrativeResult(text=self.text)


@dataclass
class FakeAudioClient(AudioClient):
    """Audio client replaying scripted chunks per object id.

    Each chunk is delivered after yielding to the event loop once, so
    concurrent streams interleave chunk by chunk.
    """

    streams: dict[str, list[StreamChunk]] = field(default_factory=dict)
    error: Exception | None = None
    audio_url: str = "https://audio.test/full.mp3"
    deliveries: list[tuple[str, StreamChunk]] = field(default_factory=list)
    stream_calls: list[dict[str, object]] = field(default_factory=list)

    async def stream(
        self,
        object_id: str,
        on_chunk: ChunkHandler,
        *,
        voice: str | None = None,
        metadata: FeedItemMetadata | None = None,
    ) -> CompleteChunk:
        self.stream_calls.append(
            {"object_id": object_id, "voice": voice, "metadata": metadata}
        )
        for chunk in self.streams.get(object_id, happy_path_chunks()):
            await asyncio.sleep(0)
            self.deliveries.append((object_id, chunk))
            on_chunk(chunk)
            if isinstance(chunk, CompleteChunk):
                return chunk
        if self.error is not None:
            raise self.error
        raise IncompleteStreamError()

    async def generate(self, text: str, voice: str | None = None) -> AudioResult:
        if self.error is not None:
            raise self.error
        return AudioResult(audio_url=self.audio_url)


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory history repository for tests."""

    tours: dict[UUID, PersistedTour] = field(default_factory=dict)

    def save_tour(self, params: CreatePersistedTourParams) -> UUID:
        now = datetime.now(tz=UTC)
        tour = PersistedTour(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            title=params.title,
            description=params.description,
            hero_image_uri=params.hero_image_uri,
            museum_id=params.museum_id,
            museum_name=params.museum_name,
            coordinates=params.coordinates,
            feed_items=params.feed_items,
            user_id=params.user_id,
            session_id=params.session_id,
        )
        self.tours[tour.id] = tour
        return tour.id

    def update_tour(self, tour_id: UUID, updates: dict[str, object]) -> None:
        current = self.tours[tour_id]
        self.tours[tour_id] = replace(
            current, **updates, updated_at=datetime.now(tz=UTC)
        )

    def get_tour(self, tour_id: UUID) -> PersistedTour | None:
        return self.tours.get(tour_id)

    def list_tours(self) -> list[PersistedTour]:
        return sorted(self.tours.values(), key=lambda t: t.created_at, reverse=True)

    def delete_tour(self, tour_id: UUID) -> None:
        self.tours.pop(tour_id, None)


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    logger = logging.getLogger("museum_tour")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url="https://tour-api.test",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def store() -> ItemStore:
    return ItemStore()


@pytest.fixture
def recognition_client() -> FakeRecognitionClient:
    return FakeRecognitionClient()


@pytest.fixture
def narrative_client() -> FakeNarrativeClient:
    return FakeNarrativeClient()


@pytest.fixture
def audio_client() -> FakeAudioClient:
    return FakeAudioClient()


@pytest.fixture
def orchestrator(
    store: ItemStore,
    recognition_client: FakeRecognitionClient,
    narrative_client: FakeNarrativeClient,
    audio_client: FakeAudioClient,
) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(
        store=store,
        photo_loader=FakePhotoLoader(),
        recognition_client=recognition_client,
        narrative_client=narrative_client,
        audio_client=audio_client,
    )


@pytest.fixture
def history_repository() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()


@pytest.fixture
def history_service(
    store: ItemStore, history_repository: InMemoryHistoryRepository
) -> TourHistoryService:
    return TourHistoryService(store=store, repository=history_repository)
