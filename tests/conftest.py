"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from voice_journal.config import Settings
from voice_journal.containers import AppContainer
from voice_journal.domain.errors import GenerationError, GenerationErrorKind
from voice_journal.domain.journal import (
    ExerciseItem,
    FoodItem,
    JournalEntry,
    JournalStats,
)
from voice_journal.services.generation import GenerationClient
from voice_journal.services.ingestion import IngestionService
from voice_journal.services.journal import JournalRepository, JournalService
from voice_journal.services.model_selector import (
    PROBE_PROMPT,
    ModelCache,
    ModelSelector,
)
from voice_journal.services.persistence import PersistenceBridge
from voice_journal.services.retry import RetryController
from voice_journal.services.transcription import TranscriptionClient

MANZANA_RESPONSE = (
    "```json\n"
    '{"foods":[{"name":"manzana","quantity":"1","calories":95,"nutrition":{}}],'
    '"exercises":[],"timestamp":"2024-01-01T00:00:00.000Z"}\n'
    "```"
)

FIXED_NOW = datetime(2024, 1, 1, tzinfo=UTC)


def rate_limited() -> GenerationError:
    return GenerationError(
        GenerationErrorKind.RATE_LIMITED, "429 RESOURCE_EXHAUSTED: quota exceeded"
    )


def auth_failure() -> GenerationError:
    return GenerationError(
        GenerationErrorKind.AUTH_FAILURE, "400 API_KEY_INVALID: API key not valid"
    )


def unknown_failure() -> GenerationError:
    return GenerationError(GenerationErrorKind.UNKNOWN, "500 internal error")


def not_found(model: str) -> GenerationError:
    return GenerationError(GenerationErrorKind.NOT_FOUND, f"404 {model} is not found")


@dataclass
class ScriptedGenerationClient(GenerationClient):
    """Fake generation client replaying scripted outcomes.

    Probe prompts succeed unless the model is listed in ``probe_failures`` or
    ``missing_models``. Other prompts pop from ``outcomes`` and fall back to
    ``default_response`` once the script is exhausted.
    """

    outcomes: list[str | GenerationError] = field(default_factory=list)
    probe_failures: dict[str, GenerationError] = field(default_factory=dict)
    missing_models: set[str] = field(default_factory=set)
    default_response: str = MANZANA_RESPONSE
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        if model in self.missing_models:
            raise not_found(model)
        if prompt == PROBE_PROMPT:
            error = self.probe_failures.get(model)
            if error is not None:
                raise error
            return "Hola"
        if not self.outcomes:
            return self.default_response
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def probed_models(self) -> list[str]:
        return [model for model, prompt in self.calls if prompt == PROBE_PROMPT]

    @property
    def generation_calls(self) -> list[tuple[str, str]]:
        return [(model, prompt) for model, prompt in self.calls if prompt != PROBE_PROMPT]


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@dataclass
class InMemoryJournalRepository(JournalRepository):
    """In-memory journal repository for tests."""

    available: bool = True
    fail_initialize: bool = False
    fail_create: bool = False
    fail_foods: bool = False
    fail_exercises: bool = False
    initialize_calls: int = 0
    entries: dict[int, dict[str, object]] = field(default_factory=dict)
    foods: dict[int, list[FoodItem]] = field(default_factory=dict)
    exercises: dict[int, list[ExerciseItem]] = field(default_factory=dict)
    next_id: int = 1

    def initialize(self) -> None:
        self.initialize_calls += 1
        if self.fail_initialize:
            raise RuntimeError("unable to open database file")
        self.available = True

    def is_available(self) -> bool:
        return self.available

    def save_record(
        self,
        timestamp: str,
        raw_text: str,
        foods: list[FoodItem],
        exercises: list[ExerciseItem],
    ) -> int:
        if self.fail_create:
            raise RuntimeError("database is locked")
        if foods and self.fail_foods:
            raise RuntimeError("constraint failed")
        if exercises and self.fail_exercises:
            raise RuntimeError("constraint failed")
        entry_id = self.next_id
        self.next_id += 1
        self.entries[entry_id] = {
            "timestamp": timestamp,
            "raw_text": raw_text,
            "created_at": f"2024-01-01T00:00:{entry_id:02d}",
        }
        if foods:
            self.foods[entry_id] = list(foods)
        if exercises:
            self.exercises[entry_id] = list(exercises)
        return entry_id

    def list_entries(self) -> list[JournalEntry]:
        return [
            entry
            for entry_id in sorted(self.entries, reverse=True)
            if (entry := self.get_entry(entry_id)) is not None
        ]

    def get_entry(self, entry_id: int) -> JournalEntry | None:
        row = self.entries.get(entry_id)
        if row is None:
            return None
        return JournalEntry(
            id=entry_id,
            timestamp=str(row["timestamp"]),
            raw_text=str(row["raw_text"]),
            created_at=str(row["created_at"]),
            foods=self.foods.get(entry_id, []),
            exercises=self.exercises.get(entry_id, []),
        )

    def delete_entry(self, entry_id: int) -> bool:
        existed = self.entries.pop(entry_id, None) is not None
        self.foods.pop(entry_id, None)
        self.exercises.pop(entry_id, None)
        return existed

    def clear(self) -> None:
        self.entries.clear()
        self.foods.clear()
        self.exercises.clear()

    def stats(self) -> JournalStats:
        foods = [food for items in self.foods.values() for food in items]
        exercises = [item for items in self.exercises.values() for item in items]
        return JournalStats(
            total_entries=len(self.entries),
            total_foods=len(foods),
            total_exercises=len(exercises),
            total_calories_consumed=sum(food.calories for food in foods),
            total_calories_burned=sum(item.calories_burned for item in exercises),
        )


@dataclass
class FakeTranscriptionClient(TranscriptionClient):
    """Fake transcription client returning a fixed transcript."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "id": "transcript-1",
            "status": "completed",
            "text": "Comí una manzana",
            "confidence": 0.93,
        }
    )
    received: list[tuple[bytes, str]] = field(default_factory=list)

    async def transcribe(self, audio: bytes, language_code: str) -> dict[str, object]:
        self.received.append((audio, language_code))
        return self.payload


def build_retry_controller(
    client: ScriptedGenerationClient,
    *,
    candidates: list[str] | None = None,
    cache: ModelCache | None = None,
    max_retries: int = 3,
    sleep: RecordingSleep | None = None,
) -> RetryController:
    selector = ModelSelector(
        client=client,
        candidates=candidates or ["gemini-2.0-flash", "gemini-2.5-flash"],
        cache=cache or ModelCache(),
    )
    return RetryController(
        client=client,
        selector=selector,
        max_retries=max_retries,
        sleep=sleep or RecordingSleep(),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gemini_api_key="gemini-key",
        database_url="sqlite:///:memory:",
    )


@pytest.fixture
def generation_client() -> ScriptedGenerationClient:
    return ScriptedGenerationClient()


@pytest.fixture
def journal_repository() -> InMemoryJournalRepository:
    return InMemoryJournalRepository()


@pytest.fixture
def container(
    settings: Settings,
    generation_client: ScriptedGenerationClient,
    journal_repository: InMemoryJournalRepository,
) -> AppContainer:
    model_cache = ModelCache()
    retry_controller = build_retry_controller(generation_client, cache=model_cache)
    ingestion_service = IngestionService(
        retry_controller=retry_controller,
        persistence=PersistenceBridge(journal_repository),
        clock=lambda: FIXED_NOW,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        model_cache=model_cache,
        ingestion_service=ingestion_service,
        journal_service=JournalService(journal_repository),
        transcription_service=None,
        close_resources=close_resources,
    )
