"""Object recognition client for the generation service."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from museum_tour.adapters.http_errors import raise_for_status, request_errors
from museum_tour.adapters.photo_loader import detect_mime_type
from museum_tour.domain.results import RecognitionResult
from museum_tour.domain.tour import FeedItemMetadata

_ENDPOINT = "/process-artwork"


class RecognitionClient(Protocol):
    """Interface for recognizing an object from photos."""

    async def process(
        self, photos: list[bytes], metadata: FeedItemMetadata | None = None
    ) -> RecognitionResult:
        """Upload photos and return the recognized object."""


@dataclass
class HttpxRecognitionClient(RecognitionClient):
    """HTTPX-backed recognition client."""

    http_client: httpx.AsyncClient
    timeout: float = 30

    @classmethod
    def create(cls, base_url: str, timeout: float = 30) -> "HttpxRecognitionClient":
        """Create a recognition client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(base_url=base_url), timeout=timeout)

    async def process(
        self, photos: list[bytes], metadata: FeedItemMetadata | None = None
    ) -> RecognitionResult:
        """Upload photos as multipart form data."""
        if not photos:
            raise ValueError("At least one photo is required")
        files = [
            ("photos", (f"photo-{index}.jpg", data, detect_mime_type(data)))
            for index, data in enumerate(photos)
        ]
        form: dict[str, str] = {}
        if metadata is not None:
            form["metadata"] = metadata.model_dump_json(exclude_none=True)
        with request_errors("POST", _ENDPOINT):
            response = await self.http_client.post(
                _ENDPOINT, files=files, data=form, timeout=self.timeout
            )
            await raise_for_status(response)
        return RecognitionResult.model_validate(response.json())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
