"""Narrative generation client for the generation service."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from museum_tour.adapters.http_errors import raise_for_status, request_errors
from museum_tour.domain.results import NarrativeResult

_ENDPOINT = "/generate-narrative"


class NarrativeClient(Protocol):
    """Interface for generating narrative text in one request."""

    async def generate(
        self, object_id: str, context: str | None = None
    ) -> NarrativeResult:
        """Return narrative text for a recognized object."""


@dataclass
class HttpxNarrativeClient(NarrativeClient):
    """HTTPX-backed narrative client."""

    http_client: httpx.AsyncClient
    timeout: float = 30

    @classmethod
    def create(cls, base_url: str, timeout: float = 30) -> "HttpxNarrativeClient":
        """Create a narrative client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(base_url=base_url), timeout=timeout)

    async def generate(
        self, object_id: str, context: str | None = None
    ) -> NarrativeResult:
        """Request narrative text for an object."""
        with request_errors("POST", _ENDPOINT):
            response = await self.http_client.post(
                _ENDPOINT,
                json={"object_id": object_id, "context": context},
                timeout=self.timeout,
            )
            await raise_for_status(response)
        return NarrativeResult.model_validate(response.json())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
