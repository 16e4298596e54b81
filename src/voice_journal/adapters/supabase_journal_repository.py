"""Supabase repository for journal entries."""

from dataclasses import dataclass

from supabase import Client

from voice_journal.domain.journal import (
    ExerciseItem,
    FoodItem,
    JournalEntry,
    JournalStats,
)
from voice_journal.services.journal import JournalRepository

_ENTRY_COLUMNS = (
    "id, timestamp, raw_text, created_at, "
    "foods(id, name, quantity, calories, protein, carbs, fat, fiber), "
    "exercises(id, type, duration, intensity, calories_burned)"
)


@dataclass
class SupabaseJournalRepository(JournalRepository):
    """Supabase implementation for journal entries.

    The schema lives in the hosted database, so ``initialize`` only checks
    that a client is configured.
    """

    client: Client | None

    def initialize(self) -> None:
        """Verify the client is configured."""
        if self.client is None:
            raise RuntimeError("Supabase client is not configured")

    def is_available(self) -> bool:
        """Return whether a client is configured."""
        return self.client is not None

    def save_record(
        self,
        timestamp: str,
        raw_text: str,
        foods: list[FoodItem],
        exercises: list[ExerciseItem],
    ) -> int:
        """Insert an entry and its items.

        PostgREST has no multi-table transaction, so a failed item insert
        deletes the new entry; the foreign keys cascade to any inserted items.
        """
        client = self._client()
        response = (
            client.table("entries")
            .insert({"timestamp": timestamp, "raw_text": raw_text})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create journal entry")
        entry_id = int(response.data[0]["id"])
        try:
            if foods:
                client.table("foods").insert(
                    [_food_row(entry_id, food) for food in foods]
                ).execute()
            if exercises:
                client.table("exercises").insert(
                    [_exercise_row(entry_id, exercise) for exercise in exercises]
                ).execute()
        except Exception:
            client.table("entries").delete().eq("id", entry_id).execute()
            raise
        return entry_id

    def list_entries(self) -> list[JournalEntry]:
        """Return entries with embedded items, newest first."""
        response = (
            self._client()
            .table("entries")
            .select(_ENTRY_COLUMNS)
            .order("id", foreign_table="foods")
            .order("id", foreign_table="exercises")
            .order("created_at", desc=True)
            .execute()
        )
        return [_to_entry(row) for row in response.data or []]

    def get_entry(self, entry_id: int) -> JournalEntry | None:
        """Return an entry by id."""
        response = (
            self._client()
            .table("entries")
            .select(_ENTRY_COLUMNS)
            .order("id", foreign_table="foods")
            .order("id", foreign_table="exercises")
            .eq("id", entry_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_entry(response.data[0])

    def delete_entry(self, entry_id: int) -> bool:
        """Delete an entry; foreign keys cascade to its items."""
        response = self._client().table("entries").delete().eq("id", entry_id).execute()
        return bool(response.data)

    def clear(self) -> None:
        """Delete every row from every table."""
        client = self._client()
        for table in ("exercises", "foods", "entries"):
            client.table(table).delete().gte("id", 0).execute()

    def stats(self) -> JournalStats:
        """Return totals computed from the stored rows."""
        client = self._client()
        entries = client.table("entries").select("id").execute().data or []
        foods = client.table("foods").select("calories").execute().data or []
        exercises = (
            client.table("exercises").select("calories_burned").execute().data or []
        )
        return JournalStats(
            total_entries=len(entries),
            total_foods=len(foods),
            total_exercises=len(exercises),
            total_calories_consumed=sum(int(row.get("calories") or 0) for row in foods),
            total_calories_burned=sum(
                int(row.get("calories_burned") or 0) for row in exercises
            ),
        )

    def _client(self) -> Client:
        if self.client is None:
            raise RuntimeError("Supabase client is not configured")
        return self.client


def _to_entry(row: dict[str, object]) -> JournalEntry:
    """Map a row with embedded foods and exercises to a journal entry."""
    foods = sorted(row.get("foods") or [], key=_row_id)
    exercises = sorted(row.get("exercises") or [], key=_row_id)
    return JournalEntry(
        id=row["id"],
        timestamp=str(row["timestamp"]),
        raw_text=row.get("raw_text"),
        created_at=row.get("created_at"),
        foods=[
            {
                "name": food["name"],
                "quantity": food.get("quantity"),
                "calories": food.get("calories"),
                "nutrition": {
                    "protein": food.get("protein"),
                    "carbs": food.get("carbs"),
                    "fat": food.get("fat"),
                    "fiber": food.get("fiber"),
                },
            }
            for food in foods
        ],
        exercises=exercises,
    )


def _food_row(entry_id: int, food: FoodItem) -> dict[str, object]:
    return {
        "entry_id": entry_id,
        "name": food.name,
        "quantity": food.quantity,
        "calories": food.calories,
        "protein": food.nutrition.protein,
        "carbs": food.nutrition.carbs,
        "fat": food.nutrition.fat,
        "fiber": food.nutrition.fiber,
    }


def _exercise_row(entry_id: int, exercise: ExerciseItem) -> dict[str, object]:
    return {
        "entry_id": entry_id,
        "type": exercise.type,
        "duration": exercise.duration,
        "intensity": exercise.intensity,
        "calories_burned": exercise.calories_burned,
    }


def _row_id(row: dict[str, object]) -> int:
    return int(row.get("id") or 0)
