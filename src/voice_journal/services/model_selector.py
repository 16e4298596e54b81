"""Selection of a currently servable generative model."""

import logging
from dataclasses import dataclass, field

from voice_journal.domain.errors import (
    AuthFailureError,
    GenerationError,
    GenerationErrorKind,
    ModelUnavailableError,
)
from voice_journal.services.generation import GenerationClient

PROBE_PROMPT = "Hola"

_logger = logging.getLogger(__name__)


@dataclass
class ModelCache:
    """Holds the model identifier that last answered a probe."""

    model: str | None = None

    def get(self) -> str | None:
        """Return the cached model, if any."""
        return self.model

    def set(self, model: str) -> None:
        """Remember a working model."""
        self.model = model

    def clear(self, expected: str | None = None) -> bool:
        """Forget the cached model.

        With ``expected`` set, only clears when the cache still holds that
        model, so a stale invalidation cannot drop a newer selection.
        """
        if expected is not None and self.model != expected:
            return False
        self.model = None
        return True


@dataclass
class ModelSelector:
    """Finds the first candidate model that answers a probe."""

    client: GenerationClient
    candidates: list[str]
    cache: ModelCache = field(default_factory=ModelCache)

    async def select(self) -> str:
        """Return the cached model or probe candidates in order."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        for candidate in self.candidates:
            _logger.info("Probing model %s", candidate)
            try:
                await self.client.generate(candidate, PROBE_PROMPT)
            except GenerationError as exc:
                if exc.kind is GenerationErrorKind.AUTH_FAILURE:
                    raise AuthFailureError(str(exc)) from exc
                _logger.info("Model %s unavailable: %s", candidate, exc)
                continue
            _logger.info("Model %s is available", candidate)
            self.cache.set(candidate)
            return candidate

        raise ModelUnavailableError(list(self.candidates))

    def invalidate(self, model: str) -> None:
        """Drop ``model`` from the cache so the next select re-probes."""
        if self.cache.clear(expected=model):
            _logger.info("Cleared cached model %s", model)
