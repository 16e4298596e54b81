"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from voice_journal.adapters.assemblyai_client import HttpxAssemblyAIClient
from voice_journal.adapters.openai_generation_client import OpenAIGenerationClient
from voice_journal.adapters.sqlalchemy_journal_repository import (
    SqlAlchemyJournalRepository,
)
from voice_journal.adapters.supabase_journal_repository import (
    SupabaseJournalRepository,
)
from voice_journal.config import Settings, parse_model_candidates
from voice_journal.services.ingestion import IngestionService
from voice_journal.services.journal import JournalRepository, JournalService
from voice_journal.services.model_selector import ModelCache, ModelSelector
from voice_journal.services.persistence import PersistenceBridge
from voice_journal.services.retry import RetryController
from voice_journal.services.transcription import TranscriptionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    model_cache: ModelCache
    ingestion_service: IngestionService
    journal_service: JournalService
    transcription_service: TranscriptionService | None
    close_resources: Callable[[], Awaitable[None]]


def build_journal_repository(settings: Settings) -> JournalRepository:
    """Create the journal store selected by ``store_backend``."""
    if settings.store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase store backend"
            )
        return SupabaseJournalRepository(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    if settings.store_backend == "sqlite":
        return SqlAlchemyJournalRepository(settings.database_url)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    generation_client = OpenAIGenerationClient.create(
        api_key=resolved_settings.gemini_api_key,
        base_url=resolved_settings.gemini_base_url,
        temperature=resolved_settings.gemini_temperature,
        max_output_tokens=resolved_settings.gemini_max_output_tokens,
    )
    model_cache = ModelCache()
    model_selector = ModelSelector(
        client=generation_client,
        candidates=parse_model_candidates(resolved_settings.gemini_models),
        cache=model_cache,
    )
    retry_controller = RetryController(
        client=generation_client,
        selector=model_selector,
        max_retries=resolved_settings.max_retries,
        backoff_base_seconds=resolved_settings.backoff_base_seconds,
    )
    journal_repository = build_journal_repository(resolved_settings)
    ingestion_service = IngestionService(
        retry_controller=retry_controller,
        persistence=PersistenceBridge(journal_repository),
    )
    journal_service = JournalService(journal_repository)

    transcription_client: HttpxAssemblyAIClient | None = None
    transcription_service: TranscriptionService | None = None
    if resolved_settings.assemblyai_api_key:
        transcription_client = HttpxAssemblyAIClient.create(
            api_key=resolved_settings.assemblyai_api_key,
            base_url=resolved_settings.assemblyai_base_url,
        )
        transcription_service = TranscriptionService(
            client=transcription_client,
            language_code=resolved_settings.transcription_language,
        )

    async def close_resources() -> None:
        await generation_client.close()
        if transcription_client is not None:
            await transcription_client.close()
        if isinstance(journal_repository, SqlAlchemyJournalRepository):
            journal_repository.close()

    return AppContainer(
        settings=resolved_settings,
        model_cache=model_cache,
        ingestion_service=ingestion_service,
        journal_service=journal_service,
        transcription_service=transcription_service,
        close_resources=close_resources,
    )
