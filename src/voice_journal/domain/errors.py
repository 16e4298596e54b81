"""Error taxonomy for the ingestion pipeline."""

from enum import Enum


class GenerationErrorKind(str, Enum):
    """Failure classes reported by the generative text service."""

    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    AUTH_FAILURE = "auth_failure"
    UNKNOWN = "unknown"


class IngestionError(Exception):
    """Base for failures surfaced to callers of the ingestion pipeline."""


class GenerationError(IngestionError):
    """A generation call failed; ``kind`` drives the retry policy."""

    def __init__(self, kind: GenerationErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class ModelUnavailableError(IngestionError):
    """No candidate model answered the probe."""

    def __init__(self, candidates: list[str]) -> None:
        super().__init__(
            "No generative model is available with the configured API key "
            f"(tried: {', '.join(candidates) or 'none'})"
        )
        self.candidates = candidates


class AuthFailureError(IngestionError):
    """The generative service rejected the credentials."""

    hint = "Check GEMINI_API_KEY in your environment or .env file."

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid API key configuration: {message}. {self.hint}")


class StoreUnavailableError(IngestionError):
    """The journal store could not be reached or written."""


class TranscriptionError(Exception):
    """The transcription provider failed to transcribe audio."""
