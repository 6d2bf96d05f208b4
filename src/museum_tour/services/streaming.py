"""Decoding of the streamed audio generation response."""

import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass

from pydantic import ValidationError

from museum_tour.domain.chunks import (
    STREAM_CHUNK_ADAPTER,
    AudioChunk,
    CompleteChunk,
    StreamChunk,
)
from museum_tour.domain.errors import IncompleteStreamError

MAX_ESTIMATED_PROGRESS = 95.0
COMPLETE_PROGRESS = 100.0
DEFAULT_PROGRESS_STEP = 5.0

_SSE_IGNORED_FIELDS = ("event:", "id:", "retry:")

_logger = logging.getLogger(__name__)

ChunkHandler = Callable[[StreamChunk], None]
ProgressEstimator = Callable[[AudioChunk, int], float]


def parse_stream_line(line: str) -> StreamChunk | None:
    """Parse one NDJSON or SSE line into a chunk, or None to skip it."""
    stripped = line.strip()
    if not stripped or stripped.startswith(":"):
        return None
    if stripped.startswith(_SSE_IGNORED_FIELDS):
        return None
    if stripped.startswith("data:"):
        stripped = stripped[len("data:") :].strip()
        if not stripped:
            return None
    try:
        return STREAM_CHUNK_ADAPTER.validate_json(stripped)
    except ValidationError as exc:
        _logger.warning(
            "Skipping malformed stream line (%s errors): %.100s",
            exc.error_count(),
            stripped,
        )
        return None


async def consume_stream(
    lines: AsyncIterable[str], on_chunk: ChunkHandler
) -> CompleteChunk:
    """Deliver each decoded chunk to on_chunk in arrival order.

    Returns the complete chunk as soon as it has been handled; raises
    IncompleteStreamError if the lines run out first.
    """
    async for line in lines:
        chunk = parse_stream_line(line)
        if chunk is None:
            continue
        on_chunk(chunk)
        if isinstance(chunk, CompleteChunk):
            return chunk
    raise IncompleteStreamError()


def estimate_progress(sequence: int, step: float = DEFAULT_PROGRESS_STEP) -> float:
    """Rough stream progress from a chunk sequence number, capped below 100."""
    return max(0.0, min(sequence * step, MAX_ESTIMATED_PROGRESS))


@dataclass(frozen=True)
class SequenceProgressEstimator:
    """Default progress estimator.

    Uses server-reported progress when a chunk carries it, otherwise the
    sequence number, otherwise the 1-based arrival index.
    """

    step: float = DEFAULT_PROGRESS_STEP

    def __call__(self, chunk: AudioChunk, arrival_index: int) -> float:
        if chunk.progress is not None:
            return max(0.0, min(chunk.progress, MAX_ESTIMATED_PROGRESS))
        sequence = chunk.sequence if chunk.sequence is not None else arrival_index
        return estimate_progress(sequence, self.step)
