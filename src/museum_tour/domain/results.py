"""Response models returned by the generation service."""

from pydantic import BaseModel, Field


class RecognitionResult(BaseModel):
    """Outcome of recognizing an object from photos."""

    object_id: str
    recognition_confidence: float = Field(ge=0.0, le=100.0)


class NarrativeResult(BaseModel):
    """Generated narrative text for an object."""

    text: str


class AudioResult(BaseModel):
    """Audio generated in one request, without streaming."""

    audio_url: str
