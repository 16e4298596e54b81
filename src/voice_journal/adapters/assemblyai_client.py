"""AssemblyAI REST client for speech transcription."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from voice_journal.domain.errors import TranscriptionError
from voice_journal.services.transcription import TranscriptionClient

_FINAL_STATUSES = {"completed", "error"}


@dataclass
class HttpxAssemblyAIClient(TranscriptionClient):
    """HTTPX-backed AssemblyAI client: upload, request, then poll."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    speech_model: str = "universal"
    poll_interval_seconds: float = 3.0
    max_polls: int = 100
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxAssemblyAIClient":
        """Create a client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def transcribe(self, audio: bytes, language_code: str) -> dict[str, object]:
        """Upload audio and wait for the finished transcript."""
        try:
            upload_url = await self._upload(audio)
            transcript_id = await self._request_transcript(upload_url, language_code)
            return await self._wait_for(transcript_id)
        except httpx.HTTPError as exc:
            raise TranscriptionError(f"AssemblyAI request failed: {exc}") from exc

    async def _upload(self, audio: bytes) -> str:
        response = await self.http_client.post(
            f"{self.base_url}/upload",
            headers=self._headers(),
            content=audio,
            timeout=60,
        )
        response.raise_for_status()
        return response.json()["upload_url"]

    async def _request_transcript(self, audio_url: str, language_code: str) -> str:
        response = await self.http_client.post(
            f"{self.base_url}/transcript",
            headers=self._headers(),
            json={
                "audio_url": audio_url,
                "speech_model": self.speech_model,
                "language_code": language_code,
            },
            timeout=15,
        )
        response.raise_for_status()
        return response.json()["id"]

    async def _wait_for(self, transcript_id: str) -> dict[str, object]:
        for _ in range(self.max_polls):
            response = await self.http_client.get(
                f"{self.base_url}/transcript/{transcript_id}",
                headers=self._headers(),
                timeout=15,
            )
            response.raise_for_status()
            payload = response.json()
            if payload.get("status") in _FINAL_STATUSES:
                return payload
            await self.sleep(self.poll_interval_seconds)
        raise TranscriptionError(f"Transcript {transcript_id} did not finish in time")

    def _headers(self) -> dict[str, str]:
        return {"authorization": self.api_key}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
