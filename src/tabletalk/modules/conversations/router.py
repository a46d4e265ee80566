"""
TableTalk Conversations - Router.

Chat about an uploaded dataset. One active conversation per (user, file).
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tabletalk.deps import get_conversation_manager, get_datasets_service
from tabletalk.modules.conversations.schemas import (
    AskRequest,
    AskResponse,
    ConversationResponse,
    MessageResponse,
)
from tabletalk.modules.conversations.service import ConversationManager, ConversationSession
from tabletalk.modules.datasets.service import DatasetsService

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


def _to_response(session: ConversationSession) -> ConversationResponse:
    conversation = session.conversation
    return ConversationResponse(
        id=conversation.id,
        file_id=conversation.file_id,
        title=conversation.title,
        created_at=conversation.created_at,
        messages=[MessageResponse.from_message(m) for m in session.messages],
    )


@router.post("/{file_id}/open", response_model=ConversationResponse)
async def open_conversation(
    file_id: str,
    datasets: Annotated[DatasetsService, Depends(get_datasets_service)],
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
):
    """
    Open (or resume) the conversation for a dataset.

    Returns the most recent conversation for this file with its history,
    creating an empty one on first use.
    """
    stored = await datasets.get_or_raise(file_id)

    session = await manager.open(
        file_id,
        file_name=stored.file_name,
        dataset=stored.dataset,
        summary=stored.summary or "",
    )
    return _to_response(session)


@router.get("/{file_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    file_id: str,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
):
    """Ordered history of the open conversation."""
    return [MessageResponse.from_message(m) for m in manager.history(file_id)]


@router.post("/{file_id}/messages", response_model=AskResponse)
async def ask_question(
    file_id: str,
    request: AskRequest,
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
):
    """
    Ask a question about the dataset.

    Reasoning failures do not fail the request: the assistant message
    carries the error text instead.
    """
    turn = await manager.ask(file_id, request.question)
    return AskResponse(
        conversation_id=turn.question.conversation_id,
        user_message=MessageResponse.from_message(turn.question),
        assistant_message=MessageResponse.from_message(turn.reply),
    )
