"""Models for chunks delivered over the streamed audio response."""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, TypeAdapter


def _unknown_if_negative(value: float | None) -> float | None:
    return None if value is not None and value < 0 else value


# Optional hints; a bad value reads as missing instead of rejecting the chunk.
DurationHint = Annotated[float | None, AfterValidator(_unknown_if_negative)]
SequenceHint = Annotated[int | None, AfterValidator(_unknown_if_negative)]


class MetadataChunk(BaseModel):
    """Audio container descriptor sent early in the stream."""

    type: Literal["metadata"] = "metadata"
    format: str
    duration: DurationHint = None


class AudioChunk(BaseModel):
    """One opaque audio fragment."""

    type: Literal["audio"] = "audio"
    data: str
    sequence: SequenceHint = None
    progress: float | None = None


class NarrativeChunk(BaseModel):
    """Narrative text, partial or complete."""

    type: Literal["narrative"] = "narrative"
    text: str


class CompleteChunk(BaseModel):
    """Terminal chunk carrying the playable audio reference."""

    type: Literal["complete"] = "complete"
    audio_url: str
    duration: DurationHint = None


StreamChunk = Annotated[
    MetadataChunk | AudioChunk | NarrativeChunk | CompleteChunk,
    Field(discriminator="type"),
]

STREAM_CHUNK_ADAPTER: TypeAdapter[StreamChunk] = TypeAdapter(StreamChunk)


class NarrativeMode(StrEnum):
    """How narrative chunks combine into the item's narrative text."""

    REPLACE = "replace"
    APPEND = "append"
