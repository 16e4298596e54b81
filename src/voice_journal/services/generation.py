"""Generative text service interface and error classification."""

from typing import Protocol

from voice_journal.domain.errors import GenerationErrorKind

_NOT_FOUND_MARKERS = ("404", "not found")
_RATE_LIMIT_MARKERS = ("429", "quota", "rate_limit_exceeded")
_AUTH_MARKERS = ("api_key", "invalid api key")


class GenerationClient(Protocol):
    """Interface for a hosted generative text model."""

    async def generate(self, model: str, prompt: str) -> str:
        """Return the model's text for a prompt.

        Implementations raise ``GenerationError`` tagged with a
        ``GenerationErrorKind`` on failure.
        """


def classify_error_message(message: str) -> GenerationErrorKind:
    """Classify a provider error from its message text.

    Markers are checked case-insensitively in a fixed order, so a message
    mentioning both a 404 and a quota is treated as not-found.
    """
    lowered = message.lower()
    if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
        return GenerationErrorKind.NOT_FOUND
    if any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return GenerationErrorKind.RATE_LIMITED
    if any(marker in lowered for marker in _AUTH_MARKERS):
        return GenerationErrorKind.AUTH_FAILURE
    return GenerationErrorKind.UNKNOWN
