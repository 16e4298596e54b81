"""Speech transcription through an external provider."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from voice_journal.domain.errors import TranscriptionError
from voice_journal.domain.transcription import Transcription
from voice_journal.services.prompts import format_timestamp, utc_now

_logger = logging.getLogger(__name__)


class TranscriptionClient(Protocol):
    """Interface for a speech-to-text provider."""

    async def transcribe(self, audio: bytes, language_code: str) -> dict[str, object]:
        """Transcribe audio and return the provider's final transcript data."""


@dataclass
class TranscriptionService:
    """Service that sends recorded audio to the transcription provider."""

    client: TranscriptionClient
    language_code: str = "es"
    clock: Callable[[], datetime] = field(default=utc_now)

    async def transcribe(self, audio: bytes) -> Transcription:
        """Return the text spoken in ``audio``."""
        if not audio:
            raise TranscriptionError("No audio received")
        _logger.info("Transcribing %s bytes of audio", len(audio))
        transcript = await self.client.transcribe(audio, self.language_code)
        if transcript.get("status") == "error":
            raise TranscriptionError(
                f"Transcription failed: {transcript.get('error') or 'unknown error'}"
            )
        confidence = transcript.get("confidence")
        return Transcription(
            text=str(transcript.get("text") or ""),
            confidence=float(confidence) if isinstance(confidence, int | float) else 0.0,
            timestamp=format_timestamp(self.clock()),
        )
