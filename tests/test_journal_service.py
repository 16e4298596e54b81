"""Tests for the journal service."""

from voice_journal.domain.journal import FoodItem
from voice_journal.services.journal import JournalService
from tests.conftest import InMemoryJournalRepository


def _seeded_repository() -> InMemoryJournalRepository:
    repository = InMemoryJournalRepository()
    repository.save_record(
        "2024-01-01T08:00:00.000Z", "desayuno", [FoodItem(name="pan", calories=80)], []
    )
    repository.save_record("2024-01-01T13:00:00.000Z", "almuerzo", [], [])
    return repository


def test_list_entries_newest_first() -> None:
    service = JournalService(_seeded_repository())

    entries = service.list_entries()

    assert [entry.raw_text for entry in entries] == ["almuerzo", "desayuno"]
    assert entries[1].foods[0].name == "pan"


def test_initializes_store_when_unavailable() -> None:
    repository = _seeded_repository()
    repository.available = False
    service = JournalService(repository)

    entry = service.get_entry(1)

    assert entry is not None
    assert repository.initialize_calls == 1


def test_delete_and_stats() -> None:
    repository = _seeded_repository()
    service = JournalService(repository)

    assert service.stats().total_calories_consumed == 80
    assert service.delete_entry(1)
    assert not service.delete_entry(1)

    stats = service.stats()
    assert stats.total_entries == 1
    assert stats.total_foods == 0


def test_clear_removes_everything() -> None:
    service = JournalService(_seeded_repository())

    service.clear()

    assert service.list_entries() == []
