"""
TableTalk - Dependency Injection.

FastAPI dependencies that assemble the pipeline collaborators per request.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from tabletalk.auth import StaticSessionProvider, User, get_current_user
from tabletalk.config import Settings, get_settings
from tabletalk.core.dataset_store import DATASET_STORE, InMemoryDatasetStore
from tabletalk.core.gemini import GeminiReasoningClient
from tabletalk.core.orchestrator import QueryOrchestrator
from tabletalk.core.reasoning_client import HttpReasoningClient, ReasoningClient
from tabletalk.modules.conversations.service import ConversationManager, sessions_for
from tabletalk.modules.conversations.store import ConversationStore, InMemoryConversationStore
from tabletalk.modules.datasets.repository import DatasetCatalog
from tabletalk.modules.datasets.service import DatasetsService


# =============================================================================
# Collaborators
# =============================================================================


def get_reasoning_client(settings: Annotated[Settings, Depends(get_settings)]) -> ReasoningClient:
    """Reasoning service selected by REASONING_PROVIDER."""
    if settings.reasoning.provider == "http":
        return HttpReasoningClient(
            url=settings.reasoning.url,
            timeout_seconds=settings.reasoning.timeout_seconds,
        )
    return GeminiReasoningClient(model=settings.gemini.model)


@lru_cache
def _conversation_store(use_supabase: bool) -> ConversationStore:
    if use_supabase:
        from tabletalk.modules.conversations.repository import SupabaseConversationStore

        return SupabaseConversationStore()
    return InMemoryConversationStore()


def get_conversation_store(settings: Annotated[Settings, Depends(get_settings)]) -> ConversationStore:
    """Process-wide conversation store (Supabase when SUPABASE_ENABLED)."""
    return _conversation_store(settings.supabase.enabled)


def get_dataset_store() -> InMemoryDatasetStore:
    return DATASET_STORE


@lru_cache
def _dataset_catalog(use_supabase: bool, bucket: str) -> DatasetCatalog | None:
    if use_supabase:
        return DatasetCatalog(bucket=bucket)
    return None


def get_dataset_catalog(settings: Annotated[Settings, Depends(get_settings)]) -> DatasetCatalog | None:
    """Durable upload catalog (uploaded_files table + storage bucket) when SUPABASE_ENABLED."""
    return _dataset_catalog(settings.supabase.enabled, settings.supabase.storage_bucket)


def get_orchestrator(
    user: Annotated[User, Depends(get_current_user)],
    client: Annotated[ReasoningClient, Depends(get_reasoning_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> QueryOrchestrator:
    """Orchestrator bound to the caller's session token."""
    return QueryOrchestrator(
        client=client,
        sessions=StaticSessionProvider(user.access_token),
        sampling=settings.sampling,
    )


def get_conversation_manager(
    user: Annotated[User, Depends(get_current_user)],
    orchestrator: Annotated[QueryOrchestrator, Depends(get_orchestrator)],
    store: Annotated[ConversationStore, Depends(get_conversation_store)],
) -> ConversationManager:
    """Conversation manager over the caller's persistent session state."""
    return ConversationManager(
        orchestrator=orchestrator,
        store=store,
        user_id=user.id,
        sessions=sessions_for(user.id),
    )


def get_datasets_service(
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[InMemoryDatasetStore, Depends(get_dataset_store)],
    orchestrator: Annotated[QueryOrchestrator, Depends(get_orchestrator)],
    catalog: Annotated[DatasetCatalog | None, Depends(get_dataset_catalog)],
) -> DatasetsService:
    """Datasets of the caller."""
    return DatasetsService(store=store, orchestrator=orchestrator, user_id=user.id, catalog=catalog)
