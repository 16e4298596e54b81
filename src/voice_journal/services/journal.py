"""Journal store interface and read-side operations."""

import logging
from dataclasses import dataclass
from typing import Protocol

from voice_journal.domain.journal import (
    ExerciseItem,
    FoodItem,
    JournalEntry,
    JournalStats,
)

_logger = logging.getLogger(__name__)


class JournalRepository(Protocol):
    """Persistence interface for journal entries."""

    def initialize(self) -> None:
        """Connect and create the schema if needed."""

    def is_available(self) -> bool:
        """Return whether the store is connected."""

    def save_record(
        self,
        timestamp: str,
        raw_text: str,
        foods: list[FoodItem],
        exercises: list[ExerciseItem],
    ) -> int:
        """Store an entry with its foods and exercises as one unit.

        Either every row is written or none is; returns the new entry id.
        """

    def list_entries(self) -> list[JournalEntry]:
        """Return all entries, newest first."""

    def get_entry(self, entry_id: int) -> JournalEntry | None:
        """Return an entry by id."""

    def delete_entry(self, entry_id: int) -> bool:
        """Delete an entry and its rows; return whether it existed."""

    def clear(self) -> None:
        """Delete every entry, food and exercise."""

    def stats(self) -> JournalStats:
        """Return totals across all entries."""


@dataclass
class JournalService:
    """Service for browsing and maintaining stored entries."""

    repository: JournalRepository

    def initialize(self) -> None:
        """Connect the store and create its schema."""
        self.repository.initialize()

    def list_entries(self) -> list[JournalEntry]:
        """Return stored entries, newest first."""
        self._ensure_available()
        return self.repository.list_entries()

    def get_entry(self, entry_id: int) -> JournalEntry | None:
        """Return a stored entry with its foods and exercises."""
        self._ensure_available()
        return self.repository.get_entry(entry_id)

    def delete_entry(self, entry_id: int) -> bool:
        """Delete an entry; its foods and exercises cascade."""
        self._ensure_available()
        deleted = self.repository.delete_entry(entry_id)
        if deleted:
            _logger.info("Deleted journal entry %s", entry_id)
        return deleted

    def clear(self) -> None:
        """Remove every stored entry."""
        self._ensure_available()
        self.repository.clear()
        _logger.info("Cleared all journal entries")

    def stats(self) -> JournalStats:
        """Return totals across stored entries."""
        self._ensure_available()
        return self.repository.stats()

    def _ensure_available(self) -> None:
        if not self.repository.is_available():
            _logger.warning("Journal store not connected, initializing")
            self.repository.initialize()
