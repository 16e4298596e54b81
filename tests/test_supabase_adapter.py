"""Tests for the Supabase journal repository."""

from dataclasses import dataclass, field

import pytest

from voice_journal.adapters.supabase_journal_repository import (
    SupabaseJournalRepository,
)
from voice_journal.domain.journal import ExerciseItem, FoodItem


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "delete": []}
    )
    last_payload: object | None = None
    last_select: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    orders: list[tuple[str, str | None]] = field(default_factory=list)
    failing_action: str | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, columns: str) -> "FakeTable":
        self._action = "select"
        self.last_select = columns
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(
        self, column: str, desc: bool = False, foreign_table: str | None = None
    ) -> "FakeTable":
        self.orders.append((column, foreign_table))
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        if action == self.failing_action:
            raise RuntimeError(f"{self.name} {action} failed")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_save_record_inserts_entry_and_items() -> None:
    client = FakeSupabaseClient()
    client.table("entries").queue("insert", [{"id": 7}])
    repository = SupabaseJournalRepository(client)

    entry_id = repository.save_record(
        "2024-01-01T00:00:00.000Z",
        "texto",
        [FoodItem(name="pan", calories=80)],
        [ExerciseItem(type="yoga", duration="20")],
    )

    assert entry_id == 7
    foods_payload = client.table("foods").last_payload
    assert isinstance(foods_payload, list)
    assert foods_payload[0]["entry_id"] == 7
    assert foods_payload[0]["calories"] == 80
    exercises_payload = client.table("exercises").last_payload
    assert isinstance(exercises_payload, list)
    assert exercises_payload[0]["duration"] == "20"


def test_save_record_raises_without_data() -> None:
    repository = SupabaseJournalRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.save_record("2024-01-01T00:00:00.000Z", "texto", [], [])


def test_save_record_deletes_entry_when_items_fail() -> None:
    client = FakeSupabaseClient()
    client.table("entries").queue("insert", [{"id": 7}])
    client.table("exercises").failing_action = "insert"
    repository = SupabaseJournalRepository(client)

    with pytest.raises(RuntimeError, match="exercises insert failed"):
        repository.save_record(
            "2024-01-01T00:00:00.000Z",
            "texto",
            [FoodItem(name="pan", calories=80)],
            [ExerciseItem(type="yoga")],
        )

    assert client.table("entries").last_filters == [("id", 7)]


def test_get_entry_maps_embedded_rows() -> None:
    client = FakeSupabaseClient()
    client.table("entries").queue(
        "select",
        [
            {
                "id": 3,
                "timestamp": "2024-01-01T00:00:00.000Z",
                "raw_text": "Comí arroz y corrí",
                "created_at": "2024-01-01T00:00:01+00:00",
                "foods": [
                    {
                        "name": "arroz",
                        "quantity": "1 taza",
                        "calories": 205,
                        "protein": "4g",
                        "carbs": None,
                        "fat": None,
                        "fiber": None,
                    }
                ],
                "exercises": [
                    {
                        "type": "correr",
                        "duration": "30",
                        "intensity": "alta",
                        "calories_burned": 300,
                    }
                ],
            }
        ],
    )
    repository = SupabaseJournalRepository(client)

    entry = repository.get_entry(3)

    assert entry is not None
    assert entry.foods[0].nutrition.protein == "4g"
    assert entry.exercises[0].calories_burned == 300
    assert ("id", 3) in client.table("entries").last_filters
    assert "foods(" in (client.table("entries").last_select or "")


def test_get_entry_missing_returns_none() -> None:
    repository = SupabaseJournalRepository(FakeSupabaseClient())

    assert repository.get_entry(99) is None


def test_delete_and_stats() -> None:
    client = FakeSupabaseClient()
    client.table("entries").queue("delete", [{"id": 3}])
    client.table("entries").queue("select", [{"id": 1}, {"id": 2}])
    client.table("foods").queue("select", [{"calories": 80}, {"calories": None}])
    client.table("exercises").queue("select", [{"calories_burned": 250}])
    repository = SupabaseJournalRepository(client)

    assert repository.delete_entry(3)
    assert not repository.delete_entry(4)

    stats = repository.stats()
    assert stats.total_entries == 2
    assert stats.total_foods == 2
    assert stats.total_calories_consumed == 80
    assert stats.total_calories_burned == 250


def test_unconfigured_client_is_unavailable() -> None:
    repository = SupabaseJournalRepository(None)

    assert not repository.is_available()
    with pytest.raises(RuntimeError):
        repository.initialize()


def test_entries_keep_item_order() -> None:
    client = FakeSupabaseClient()
    client.table("entries").queue(
        "select",
        [
            {
                "id": 4,
                "timestamp": "2024-01-01T00:00:00.000Z",
                "raw_text": "Comí pan, queso y arroz; caminé y nadé",
                "created_at": "2024-01-01T00:00:01+00:00",
                "foods": [
                    {"id": 12, "name": "arroz", "calories": 205},
                    {"id": 10, "name": "pan", "calories": 80},
                    {"id": 11, "name": "queso", "calories": 110},
                ],
                "exercises": [
                    {"id": 6, "type": "nadar", "calories_burned": 250},
                    {"id": 5, "type": "caminar", "calories_burned": 80},
                ],
            }
        ],
    )
    repository = SupabaseJournalRepository(client)

    entries = repository.list_entries()

    assert [food.name for food in entries[0].foods] == ["pan", "queso", "arroz"]
    assert [item.type for item in entries[0].exercises] == ["caminar", "nadar"]
    orders = client.table("entries").orders
    assert ("id", "foods") in orders
    assert ("id", "exercises") in orders
    assert "foods(id," in (client.table("entries").last_select or "")
