"""Dependency container wiring for the tour pipeline."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from museum_tour.adapters.audio_client import AudioClient, HttpxAudioClient
from museum_tour.adapters.narrative_client import HttpxNarrativeClient, NarrativeClient
from museum_tour.adapters.photo_loader import HttpxPhotoLoader, PhotoLoader
from museum_tour.adapters.recognition_client import (
    HttpxRecognitionClient,
    RecognitionClient,
)
from museum_tour.adapters.supabase_history_repository import (
    SupabaseHistoryRepository,
)
from museum_tour.app_logging import configure_logging
from museum_tour.config import Settings, parse_narrative_mode
from museum_tour.services.history import TourHistoryService
from museum_tour.services.items import ItemStore
from museum_tour.services.streaming import SequenceProgressEstimator
from museum_tour.services.submission import SubmissionOrchestrator


@dataclass
class AppContainer:
    """Holds pipeline-wide dependencies."""

    settings: Settings
    item_store: ItemStore
    photo_loader: PhotoLoader
    recognition_client: RecognitionClient
    narrative_client: NarrativeClient
    audio_client: AudioClient
    orchestrator: SubmissionOrchestrator
    history_service: TourHistoryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    item_store = ItemStore()
    photo_loader = HttpxPhotoLoader.create()
    recognition_client = HttpxRecognitionClient.create(
        base_url=resolved_settings.api_base_url,
        timeout=resolved_settings.api_timeout_seconds,
    )
    narrative_client = HttpxNarrativeClient.create(
        base_url=resolved_settings.api_base_url,
        timeout=resolved_settings.api_timeout_seconds,
    )
    audio_client = HttpxAudioClient.create(
        base_url=resolved_settings.api_base_url,
        timeout=resolved_settings.api_timeout_seconds,
        stream_timeout=resolved_settings.stream_timeout_seconds,
    )
    orchestrator = SubmissionOrchestrator(
        store=item_store,
        photo_loader=photo_loader,
        recognition_client=recognition_client,
        narrative_client=narrative_client,
        audio_client=audio_client,
        voice=resolved_settings.audio_voice,
        narrative_mode=parse_narrative_mode(resolved_settings.narrative_mode),
        progress_estimator=SequenceProgressEstimator(
            step=resolved_settings.audio_progress_step
        ),
    )
    history_service = TourHistoryService(
        store=item_store,
        repository=SupabaseHistoryRepository(supabase_client),
    )

    async def close_resources() -> None:
        await photo_loader.close()
        await recognition_client.close()
        await narrative_client.close()
        await audio_client.close()

    return AppContainer(
        settings=resolved_settings,
        item_store=item_store,
        photo_loader=photo_loader,
        recognition_client=recognition_client,
        narrative_client=narrative_client,
        audio_client=audio_client,
        orchestrator=orchestrator,
        history_service=history_service,
        close_resources=close_resources,
    )
