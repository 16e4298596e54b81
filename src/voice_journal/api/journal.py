"""Journal API endpoints consumed by the desktop renderer."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from voice_journal.api.models import ProcessTextRequest, TranscriptionRequest
from voice_journal.domain.errors import IngestionError, TranscriptionError
from voice_journal.services.prompts import format_timestamp, utc_now

if TYPE_CHECKING:
    from voice_journal.containers import AppContainer

router = APIRouter(prefix="/api", tags=["journal"])

_logger = logging.getLogger(__name__)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


@router.get("/health")
async def health(request: Request) -> dict[str, str]:
    """Report service status and configured providers."""
    container = _container(request)
    return {
        "status": "OK",
        "transcription_method": (
            "assemblyai" if container.transcription_service else "web_speech_api"
        ),
        "gemini_api": (
            "configured" if container.settings.gemini_api_key else "not_configured"
        ),
        "timestamp": format_timestamp(utc_now()),
    }


@router.post("/transcribe", response_model=None)
async def transcribe(
    body: TranscriptionRequest,
) -> dict[str, object] | JSONResponse:
    """Acknowledge a transcription produced by the client."""
    if not body.transcription:
        return _failure(status.HTTP_400_BAD_REQUEST, "Transcription is required")
    _logger.info("Transcription received (%s chars)", len(body.transcription))
    return {
        "success": True,
        "transcription": body.transcription,
        "timestamp": format_timestamp(utc_now()),
        "method": "web_speech_api",
    }


@router.post("/upload-audio", response_model=None)
async def upload_audio(request: Request) -> dict[str, object] | JSONResponse:
    """Transcribe a raw audio body with the configured provider."""
    container = _container(request)
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("audio/"):
        return _failure(status.HTTP_400_BAD_REQUEST, "Only audio files are allowed")
    audio = await request.body()
    if not audio:
        return _failure(status.HTTP_400_BAD_REQUEST, "No audio file received")
    if len(audio) > container.settings.max_audio_bytes:
        return _failure(status.HTTP_400_BAD_REQUEST, "Audio file is too large")
    if container.transcription_service is None:
        return _failure(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Audio transcription is not configured"
        )
    try:
        transcription = await container.transcription_service.transcribe(audio)
    except TranscriptionError as exc:
        _logger.error("Audio transcription failed: %s", exc)
        return _failure(status.HTTP_502_BAD_GATEWAY, str(exc))
    return {
        "success": True,
        "transcription": transcription.text,
        "confidence": transcription.confidence,
        "size": len(audio),
        "timestamp": transcription.timestamp,
    }


@router.post("/process-text", response_model=None)
async def process_text(
    body: ProcessTextRequest, request: Request
) -> dict[str, object] | JSONResponse:
    """Extract foods and exercises from text and store the result."""
    if not body.text or not body.text.strip():
        return _failure(status.HTTP_400_BAD_REQUEST, "Text is required")
    container = _container(request)
    try:
        result = await container.ingestion_service.ingest(body.text)
    except IngestionError as exc:
        _logger.error("Text processing failed: %s", exc)
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error processing text: {exc}"
        )
    payload: dict[str, object] = {
        "success": True,
        "data": result.record.model_dump(mode="json", exclude_none=True),
    }
    if result.warning:
        payload["warning"] = result.warning
    return payload


@router.get("/entries", response_model=None)
async def list_entries(request: Request) -> dict[str, object] | JSONResponse:
    """Return every stored entry, newest first."""
    try:
        entries = _container(request).journal_service.list_entries()
    except Exception as exc:
        _logger.exception("Failed to list journal entries")
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error loading entries: {exc}"
        )
    return {
        "success": True,
        "entries": [entry.model_dump(mode="json") for entry in entries],
    }


@router.get("/entries/{entry_id}", response_model=None)
async def get_entry(entry_id: int, request: Request) -> dict[str, object] | JSONResponse:
    """Return one stored entry."""
    try:
        entry = _container(request).journal_service.get_entry(entry_id)
    except Exception as exc:
        _logger.exception("Failed to load journal entry %s", entry_id)
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error loading entry: {exc}"
        )
    if entry is None:
        return _failure(status.HTTP_404_NOT_FOUND, "Entry not found")
    return {"success": True, "entry": entry.model_dump(mode="json")}


@router.delete("/entries/{entry_id}", response_model=None)
async def delete_entry(
    entry_id: int, request: Request
) -> dict[str, object] | JSONResponse:
    """Delete one stored entry with its foods and exercises."""
    try:
        deleted = _container(request).journal_service.delete_entry(entry_id)
    except Exception as exc:
        _logger.exception("Failed to delete journal entry %s", entry_id)
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error deleting entry: {exc}"
        )
    if not deleted:
        return _failure(status.HTTP_404_NOT_FOUND, "Entry not found")
    return {"success": True}


@router.get("/stats", response_model=None)
async def stats(request: Request) -> dict[str, object] | JSONResponse:
    """Return totals across stored entries."""
    try:
        totals = _container(request).journal_service.stats()
    except Exception as exc:
        _logger.exception("Failed to compute journal stats")
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error loading stats: {exc}"
        )
    return {"success": True, "stats": asdict(totals)}


@router.post("/clear-database", response_model=None)
async def clear_database(request: Request) -> dict[str, object] | JSONResponse:
    """Remove every stored entry."""
    try:
        _container(request).journal_service.clear()
    except Exception as exc:
        _logger.exception("Failed to clear journal database")
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error clearing database: {exc}"
        )
    return {"success": True, "message": "Database cleared"}
