"""Orchestration of one photo submission through the generation pipeline."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from museum_tour.adapters.audio_client import AudioClient
from museum_tour.adapters.narrative_client import NarrativeClient
from museum_tour.adapters.photo_loader import PhotoLoader
from museum_tour.adapters.recognition_client import RecognitionClient
from museum_tour.domain.chunks import (
    AudioChunk,
    CompleteChunk,
    MetadataChunk,
    NarrativeChunk,
    NarrativeMode,
    StreamChunk,
)
from museum_tour.domain.errors import (
    AudioFailure,
    IncompleteStreamError,
    NarrativeFailure,
    RecognitionFailure,
    StreamFailure,
)
from museum_tour.domain.results import AudioResult, NarrativeResult, RecognitionResult
from museum_tour.domain.tour import FeedItemMetadata, FeedItemStatus
from museum_tour.services.items import ItemStore
from museum_tour.services.streaming import (
    COMPLETE_PROGRESS,
    ProgressEstimator,
    SequenceProgressEstimator,
)

DEFAULT_ERROR_MESSAGE = "Failed to process object"
CANCELLED_ERROR_MESSAGE = "Submission cancelled"

_logger = logging.getLogger(__name__)

MetadataObserver = Callable[[UUID, MetadataChunk], None]


@dataclass(frozen=True)
class SubmissionSuccess:
    """Successful submission outcome."""

    item_id: UUID


@dataclass(frozen=True)
class SubmissionFailure:
    """Failed submission outcome with a user-facing message."""

    error: str


SubmitResult = tuple[SubmissionSuccess, None] | tuple[None, SubmissionFailure]


@dataclass
class _StreamRoute:
    """Routing state owned by a single submit call."""

    item_id: UUID
    audio_count: int = 0
    complete: CompleteChunk | None = None


@dataclass
class SubmissionOrchestrator:
    """Drives tour items from upload to ready or error.

    Failures never escape: every submit call returns a two-element tuple of
    (success, None) or (None, failure), and the item is left in a terminal
    state. Streamed chunks are routed through a route object created per call,
    so overlapping submissions never write to each other's items.
    """

    store: ItemStore
    photo_loader: PhotoLoader
    recognition_client: RecognitionClient
    narrative_client: NarrativeClient
    audio_client: AudioClient
    voice: str | None = None
    narrative_mode: NarrativeMode = NarrativeMode.REPLACE
    progress_estimator: ProgressEstimator = field(
        default_factory=SequenceProgressEstimator
    )
    _active_submissions: int = field(default=0, init=False, repr=False)

    @property
    def active_submissions(self) -> int:
        """Number of submit calls currently running."""
        return self._active_submissions

    async def submit(
        self,
        photos: Sequence[str],
        metadata: FeedItemMetadata | None = None,
        *,
        voice: str | None = None,
        on_metadata: MetadataObserver | None = None,
    ) -> SubmitResult:
        """Recognize the object and stream its narrated audio."""

        async def pipeline(item_id: UUID) -> None:
            await self._stream_pipeline(
                item_id, photos, metadata, voice or self.voice, on_metadata
            )

        return await self._run(photos, metadata, pipeline)

    async def submit_sequential(
        self,
        photos: Sequence[str],
        metadata: FeedItemMetadata | None = None,
        *,
        context: str | None = None,
        voice: str | None = None,
    ) -> SubmitResult:
        """Recognize, then generate narrative, then audio, without streaming."""

        async def pipeline(item_id: UUID) -> None:
            await self._sequential_pipeline(
                item_id, photos, metadata, context, voice or self.voice
            )

        return await self._run(photos, metadata, pipeline)

    async def _run(
        self,
        photos: Sequence[str],
        metadata: FeedItemMetadata | None,
        pipeline: Callable[[UUID], Awaitable[None]],
    ) -> SubmitResult:
        self._enter()
        item_id: UUID | None = None
        try:
            item_id = self.store.create(photos, metadata)
            await pipeline(item_id)
        except asyncio.CancelledError:
            _logger.info("Tour submission cancelled for item %s", item_id)
            if item_id is not None:
                self.store.update(
                    item_id, status=FeedItemStatus.ERROR, error=CANCELLED_ERROR_MESSAGE
                )
            raise
        except Exception as exc:
            message = _error_message(exc)
            _logger.exception("Tour submission failed for item %s", item_id)
            if item_id is not None:
                self.store.update(item_id, status=FeedItemStatus.ERROR, error=message)
            return None, SubmissionFailure(error=message)
        finally:
            self._exit()

        _logger.debug("Tour submission complete for item %s", item_id)
        return SubmissionSuccess(item_id=item_id), None

    async def _stream_pipeline(
        self,
        item_id: UUID,
        photos: Sequence[str],
        metadata: FeedItemMetadata | None,
        voice: str | None,
        on_metadata: MetadataObserver | None,
    ) -> None:
        self.store.update(item_id, status=FeedItemStatus.UPLOADING)
        recognition = await self._recognize(photos, metadata)

        self.store.update(
            item_id,
            status=FeedItemStatus.STREAMING_AUDIO,
            object_id=recognition.object_id,
            recognition_confidence=recognition.recognition_confidence,
            audio_stream_progress=0.0,
            audio_chunks=(),
        )
        _logger.debug(
            "Item %s recognized as %s (%s%%)",
            item_id,
            recognition.object_id,
            recognition.recognition_confidence,
        )

        route = _StreamRoute(item_id=item_id)
        await self._stream_audio(
            route, recognition.object_id, voice, metadata, on_metadata
        )
        complete = route.complete
        if complete is None:
            raise IncompleteStreamError()

        self.store.update(
            item_id,
            status=FeedItemStatus.READY,
            audio_url=complete.audio_url,
            audio_duration=complete.duration,
            audio_stream_progress=COMPLETE_PROGRESS,
        )

    async def _sequential_pipeline(
        self,
        item_id: UUID,
        photos: Sequence[str],
        metadata: FeedItemMetadata | None,
        context: str | None,
        voice: str | None,
    ) -> None:
        self.store.update(item_id, status=FeedItemStatus.UPLOADING)
        recognition = await self._recognize(photos, metadata)

        self.store.update(
            item_id,
            status=FeedItemStatus.GENERATING_NARRATIVE,
            object_id=recognition.object_id,
            recognition_confidence=recognition.recognition_confidence,
        )
        narrative = await self._generate_narrative(recognition.object_id, context)

        self.store.update(
            item_id,
            status=FeedItemStatus.GENERATING_AUDIO,
            narrative_text=narrative.text,
        )
        audio = await self._generate_audio(narrative.text, voice)

        self.store.update(
            item_id, status=FeedItemStatus.READY, audio_url=audio.audio_url
        )

    async def _recognize(
        self, photos: Sequence[str], metadata: FeedItemMetadata | None
    ) -> RecognitionResult:
        try:
            photo_bytes = [await self.photo_loader.load(photo) for photo in photos]
            return await self.recognition_client.process(photo_bytes, metadata)
        except Exception as exc:
            raise RecognitionFailure(_error_message(exc)) from exc

    async def _generate_narrative(
        self, object_id: str, context: str | None
    ) -> NarrativeResult:
        try:
            return await self.narrative_client.generate(object_id, context)
        except Exception as exc:
            raise NarrativeFailure(_error_message(exc)) from exc

    async def _generate_audio(self, text: str, voice: str | None) -> AudioResult:
        try:
            return await self.audio_client.generate(text, voice)
        except Exception as exc:
            raise AudioFailure(_error_message(exc)) from exc

    async def _stream_audio(
        self,
        route: _StreamRoute,
        object_id: str,
        voice: str | None,
        metadata: FeedItemMetadata | None,
        on_metadata: MetadataObserver | None,
    ) -> None:
        def on_chunk(chunk: StreamChunk) -> None:
            self._handle_chunk(route, chunk, on_metadata)

        try:
            await self.audio_client.stream(
                object_id, on_chunk, voice=voice, metadata=metadata
            )
        except StreamFailure:
            raise
        except Exception as exc:
            raise StreamFailure(_error_message(exc)) from exc

    def _handle_chunk(
        self,
        route: _StreamRoute,
        chunk: StreamChunk,
        on_metadata: MetadataObserver | None,
    ) -> None:
        if route.complete is not None:
            return
        if isinstance(chunk, AudioChunk):
            route.audio_count += 1
            progress = self.progress_estimator(chunk, route.audio_count)
            self.store.append_audio_chunk(route.item_id, chunk.data, progress)
        elif isinstance(chunk, NarrativeChunk):
            self._apply_narrative(route.item_id, chunk.text)
        elif isinstance(chunk, MetadataChunk):
            if on_metadata is not None:
                on_metadata(route.item_id, chunk)
        elif isinstance(chunk, CompleteChunk):
            route.complete = chunk

    def _apply_narrative(self, item_id: UUID, text: str) -> None:
        if self.narrative_mode == NarrativeMode.APPEND:
            item = self.store.get(item_id)
            if item is None:
                return
            text = (item.narrative_text or "") + text
        self.store.update(item_id, narrative_text=text)

    def _enter(self) -> None:
        self._active_submissions += 1
        self.store.set_busy(True)

    def _exit(self) -> None:
        self._active_submissions -= 1
        self.store.set_busy(self._active_submissions > 0)


def _error_message(exc: BaseException) -> str:
    """Return a user-facing message for a failure."""
    return str(exc).strip() or DEFAULT_ERROR_MESSAGE
