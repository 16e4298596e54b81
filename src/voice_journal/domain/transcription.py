"""Models for speech transcription results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Transcription:
    """Text returned by the transcription provider."""

    text: str
    confidence: float
    timestamp: str
