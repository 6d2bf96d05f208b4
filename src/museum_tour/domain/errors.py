"""Error types raised inside the tour pipeline."""


class TourPipelineError(Exception):
    """Base class for pipeline failures."""


class ApiError(TourPipelineError):
    """Generation service request failed at the transport level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: object | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


class RecognitionFailure(TourPipelineError):
    """Object recognition rejected or errored."""


class NarrativeFailure(TourPipelineError):
    """Narrative generation rejected or errored."""


class AudioFailure(TourPipelineError):
    """Non-streaming audio generation rejected or errored."""


class StreamFailure(TourPipelineError):
    """Audio stream errored or ended early."""


class IncompleteStreamError(StreamFailure):
    """Audio stream ended without a complete chunk."""

    def __init__(self, message: str = "Audio stream ended before completion") -> None:
        super().__init__(message)
