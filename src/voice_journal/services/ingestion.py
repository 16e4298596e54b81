"""End-to-end ingestion of a user utterance."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from voice_journal.domain.journal import NutritionRecord
from voice_journal.services.normalizer import normalize
from voice_journal.services.persistence import PersistenceBridge
from voice_journal.services.prompts import build_prompt, format_timestamp, utc_now
from voice_journal.services.retry import RetryController

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of one ingestion cycle."""

    record: NutritionRecord
    warning: str | None = None


@dataclass
class IngestionService:
    """Turns text into a stored nutrition record.

    Steps run strictly in order: prompt, model call with retries,
    normalization, persistence. Only ``IngestionError`` subclasses escape.
    """

    retry_controller: RetryController
    persistence: PersistenceBridge
    clock: Callable[[], datetime] = field(default=utc_now)

    async def ingest(self, text: str) -> IngestionResult:
        """Run one ingestion cycle for ``text``."""
        created_at = self.clock()
        prompt = build_prompt(text, lambda: created_at)
        _logger.info("Processing text (%s chars)", len(text))
        raw_output = await self.retry_controller.call(prompt)
        record = normalize(raw_output, text, format_timestamp(created_at))
        if record.is_fallback:
            _logger.warning("Returning fallback record: %s", record.parse_error)
        outcome = self.persistence.persist(record)
        return IngestionResult(record=outcome.record, warning=outcome.warning)
