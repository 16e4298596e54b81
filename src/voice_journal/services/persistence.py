"""Write-through of nutrition records to the journal store."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from voice_journal.domain.errors import StoreUnavailableError
from voice_journal.domain.journal import NutritionRecord
from voice_journal.services.journal import JournalRepository

SYNTHETIC_ID_PREFIX = "unsaved-"

_logger = logging.getLogger(__name__)


@dataclass
class SyntheticIdGenerator:
    """Clock-derived ids for records the store could not save.

    Ids are strings with an ``unsaved-`` prefix so they never collide with
    integer ids assigned by the store, and they strictly increase even when
    the clock does not advance between calls.
    """

    clock_ms: Callable[[], int] = field(default=lambda: time.time_ns() // 1_000_000)
    _last: int = 0

    def next_id(self) -> str:
        """Return a new synthetic id."""
        value = max(self.clock_ms(), self._last + 1)
        self._last = value
        return f"{SYNTHETIC_ID_PREFIX}{value}"


def is_synthetic_id(value: object) -> bool:
    """Whether an id was generated locally instead of by the store."""
    return isinstance(value, str) and value.startswith(SYNTHETIC_ID_PREFIX)


@dataclass(frozen=True)
class PersistOutcome:
    """Record returned by the bridge plus an optional soft-failure warning."""

    record: NutritionRecord
    warning: str | None = None

    @property
    def persisted(self) -> bool:
        """Whether the record reached the store."""
        return self.record.persisted


@dataclass
class PersistenceBridge:
    """Saves records as one entry with its food and exercise rows.

    The repository writes the entry and its items atomically, so a failed
    save leaves nothing behind.

    Store failures never fail ingestion: the record comes back with a
    synthetic id and the outcome carries a warning instead.
    """

    repository: JournalRepository
    id_generator: SyntheticIdGenerator = field(default_factory=SyntheticIdGenerator)

    def persist(self, record: NutritionRecord) -> PersistOutcome:
        """Write ``record`` to the store and attach its id."""
        try:
            entry_id = self._write(record)
        except Exception as exc:
            synthetic_id = self.id_generator.next_id()
            _logger.warning(
                "Could not save journal entry, using temporary id %s",
                synthetic_id,
                exc_info=exc,
            )
            return PersistOutcome(
                record=record.model_copy(
                    update={"id": synthetic_id, "persisted": False}
                ),
                warning=f"Entry was not saved: {exc}",
            )
        _logger.info(
            "Saved journal entry %s (foods=%s, exercises=%s)",
            entry_id,
            len(record.foods),
            len(record.exercises),
        )
        return PersistOutcome(
            record=record.model_copy(update={"id": entry_id, "persisted": True})
        )

    def _write(self, record: NutritionRecord) -> int:
        """Write the entry and its items in a single store operation."""
        if not self.repository.is_available():
            _logger.warning("Journal store not connected, initializing")
            self.repository.initialize()
        if not self.repository.is_available():
            raise StoreUnavailableError("journal store is not available")
        return self.repository.save_record(
            record.timestamp, record.raw_text, record.foods, record.exercises
        )
