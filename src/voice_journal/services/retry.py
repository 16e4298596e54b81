"""Retry policy for generation calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from voice_journal.domain.errors import (
    AuthFailureError,
    GenerationError,
    GenerationErrorKind,
)
from voice_journal.services.generation import GenerationClient
from voice_journal.services.model_selector import ModelSelector

_logger = logging.getLogger(__name__)


@dataclass
class RetryController:
    """Calls the generative model with a bounded, error-aware retry loop.

    Each failed attempt increments the attempt counter. Not-found errors
    invalidate the selected model, rate limits back off exponentially,
    auth failures stop immediately and anything else is retried at once.
    After ``max_retries + 1`` attempts the last error propagates.
    """

    client: GenerationClient
    selector: ModelSelector
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def call(self, prompt: str, max_retries: int | None = None) -> str:
        """Return the raw response text for ``prompt``."""
        budget = self.max_retries if max_retries is None else max_retries
        attempt = 0
        while True:
            model = await self.selector.select()
            try:
                return await self.client.generate(model, prompt)
            except GenerationError as exc:
                attempt += 1
                _logger.warning(
                    "Generation failed (attempt %s/%s, model=%s, kind=%s): %s",
                    attempt,
                    budget + 1,
                    model,
                    exc.kind.value,
                    exc,
                )
                if exc.kind is GenerationErrorKind.AUTH_FAILURE:
                    raise AuthFailureError(str(exc)) from exc
                if exc.kind is GenerationErrorKind.NOT_FOUND:
                    self.selector.invalidate(model)
                if attempt > budget:
                    raise
                if exc.kind is GenerationErrorKind.RATE_LIMITED:
                    delay = self.backoff_seconds(attempt)
                    _logger.info("Rate limited, waiting %.1fs before retrying", delay)
                    await self.sleep(delay)

    def backoff_seconds(self, attempt: int) -> float:
        """Exponential backoff delay for a 1-based attempt number."""
        return self.backoff_base_seconds * 2**attempt
