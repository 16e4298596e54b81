"""OpenAI-compatible chat completions client for Gemini models."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from voice_journal.domain.errors import GenerationError, GenerationErrorKind
from voice_journal.services.generation import (
    GenerationClient,
    classify_error_message,
)


@dataclass
class OpenAIGenerationClient(GenerationClient):
    """Generation client backed by an OpenAI-compatible endpoint."""

    client: AsyncOpenAI
    temperature: float = 0.7
    max_output_tokens: int = 2048

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
    ) -> "OpenAIGenerationClient":
        """Create a client for the given endpoint."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0),
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

    async def generate(self, model: str, prompt: str) -> str:
        """Send a single user prompt and return the reply text."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_output_tokens,
            )
        except openai.OpenAIError as exc:
            raise GenerationError(classify_openai_error(exc), str(exc)) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError(
                GenerationErrorKind.UNKNOWN, f"Model {model} returned an empty response"
            )
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def classify_openai_error(exc: Exception) -> GenerationErrorKind:
    """Map SDK exception types to error kinds, falling back to the message."""
    if isinstance(exc, openai.NotFoundError):
        return GenerationErrorKind.NOT_FOUND
    if isinstance(exc, openai.RateLimitError):
        return GenerationErrorKind.RATE_LIMITED
    if isinstance(exc, openai.AuthenticationError | openai.PermissionDeniedError):
        return GenerationErrorKind.AUTH_FAILURE
    return classify_error_message(str(exc))
