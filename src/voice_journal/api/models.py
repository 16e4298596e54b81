"""Request bodies accepted by the journal API."""

from pydantic import BaseModel


class ProcessTextRequest(BaseModel):
    """Text to run through the ingestion pipeline."""

    text: str | None = None


class TranscriptionRequest(BaseModel):
    """Transcription produced on the client, e.g. by the Web Speech API."""

    transcription: str | None = None
