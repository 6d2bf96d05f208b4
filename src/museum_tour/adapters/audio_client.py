"""Audio generation client, streamed and non-streamed."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from museum_tour.adapters.http_errors import raise_for_status, request_errors
from museum_tour.domain.chunks import CompleteChunk
from museum_tour.domain.results import AudioResult
from museum_tour.domain.tour import FeedItemMetadata
from museum_tour.services.streaming import ChunkHandler, consume_stream

_STREAM_ENDPOINT = "/generate-audio/stream"
_GENERATE_ENDPOINT = "/generate-audio"


class AudioClient(Protocol):
    """Interface for audio generation."""

    async def stream(
        self,
        object_id: str,
        on_chunk: ChunkHandler,
        *,
        voice: str | None = None,
        metadata: FeedItemMetadata | None = None,
    ) -> CompleteChunk:
        """Stream audio for an object, calling on_chunk per decoded chunk."""

    async def generate(self, text: str, voice: str | None = None) -> AudioResult:
        """Generate audio for narrative text in one request."""


@dataclass
class HttpxAudioClient(AudioClient):
    """HTTPX-backed audio client."""

    http_client: httpx.AsyncClient
    timeout: float = 30
    stream_timeout: float = 120

    @classmethod
    def create(
        cls, base_url: str, timeout: float = 30, stream_timeout: float = 120
    ) -> "HttpxAudioClient":
        """Create an audio client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(base_url=base_url),
            timeout=timeout,
            stream_timeout=stream_timeout,
        )

    async def stream(
        self,
        object_id: str,
        on_chunk: ChunkHandler,
        *,
        voice: str | None = None,
        metadata: FeedItemMetadata | None = None,
    ) -> CompleteChunk:
        """Open the audio stream and decode it until the complete chunk."""
        payload = _with_voice({"object_id": object_id}, voice)
        if metadata is not None:
            payload["metadata"] = metadata.model_dump(exclude_none=True)
        timeout = httpx.Timeout(self.timeout, read=self.stream_timeout)
        with request_errors("STREAM POST", _STREAM_ENDPOINT):
            async with self.http_client.stream(
                "POST", _STREAM_ENDPOINT, json=payload, timeout=timeout
            ) as response:
                await raise_for_status(response)
                return await consume_stream(response.aiter_lines(), on_chunk)

    async def generate(self, text: str, voice: str | None = None) -> AudioResult:
        """Generate audio for narrative text."""
        payload = _with_voice({"text": text}, voice)
        with request_errors("POST", _GENERATE_ENDPOINT):
            response = await self.http_client.post(
                _GENERATE_ENDPOINT,
                json=payload,
                timeout=self.timeout,
            )
            await raise_for_status(response)
        return AudioResult.model_validate(response.json())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _with_voice(payload: dict[str, object], voice: str | None) -> dict[str, object]:
    """Add the voice field only when one is chosen."""
    if voice:
        payload["voice"] = voice
    return payload
