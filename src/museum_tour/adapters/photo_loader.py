"""Loading of captured photos referenced by path or URL."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from museum_tour.adapters.http_errors import raise_for_status, request_errors


class PhotoLoader(Protocol):
    """Interface for reading photo bytes from a local reference."""

    async def load(self, reference: str) -> bytes:
        """Return the bytes of the referenced photo."""


@dataclass
class HttpxPhotoLoader(PhotoLoader):
    """Photo loader for file paths, file:// URIs and http(s) URLs."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxPhotoLoader":
        """Create a photo loader with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def load(self, reference: str) -> bytes:
        """Read photo bytes from disk or download them."""
        parsed = urlparse(reference)
        if parsed.scheme in {"http", "https"}:
            with request_errors("GET", reference):
                response = await self.http_client.get(reference, timeout=20)
                await raise_for_status(response)
            return response.content
        if parsed.scheme == "file":
            path = Path(url2pathname(parsed.path))
        else:
            path = Path(reference)
        return await asyncio.to_thread(path.read_bytes)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[4:12] in {b"ftypheic", b"ftypheix", b"ftypmif1"}:
        return "image/heic"
    return "image/jpeg"
