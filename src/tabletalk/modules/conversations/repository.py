"""
TableTalk Conversations - Repository.

Database operations for conversations and messages in Supabase.

Tables:
- conversations(id, user_id, file_id, title, created_at)
- messages(id, conversation_id, role, content, chart_data jsonb, created_at)
"""

from typing import Any
from uuid import UUID

from supabase import Client

from tabletalk.core.repository import BaseRepository
from tabletalk.core.response_interpreter import parse_chart
from tabletalk.modules.conversations.schemas import Conversation, Message
from tabletalk.modules.conversations.store import ConversationStore


class ConversationsRepository(BaseRepository[dict[str, Any]]):
    """Repository for conversations in Supabase."""

    @property
    def table_name(self) -> str:
        return "conversations"

    async def find_latest(self, user_id: UUID, file_id: str) -> dict[str, Any] | None:
        """Most recently created conversation for a user's file."""
        rows = await self.find(
            {"user_id": str(user_id), "file_id": file_id},
            desc=True,
            limit=1,
        )
        return rows[0] if rows else None


class MessagesRepository(BaseRepository[dict[str, Any]]):
    """Repository for conversation messages in Supabase."""

    @property
    def table_name(self) -> str:
        return "messages"

    async def list_by_conversation(self, conversation_id: UUID) -> list[dict[str, Any]]:
        """Messages in creation order."""
        return await self.find({"conversation_id": str(conversation_id)})


def _conversation_from_row(row: dict[str, Any]) -> Conversation:
    return Conversation(
        id=row["id"],
        user_id=row["user_id"],
        file_id=row["file_id"],
        title=row.get("title") or "",
        created_at=row["created_at"],
    )


def _message_from_row(row: dict[str, Any]) -> Message:
    # Rows may hold charts written without validation; invalid ones load as no chart.
    chart_data = row.get("chart_data")
    return Message(
        id=row["id"],
        conversation_id=row["conversation_id"],
        role=row["role"],
        content=row.get("content") or "",
        chart=parse_chart(chart_data),
        status="confirmed",
        created_at=row["created_at"],
    )


class SupabaseConversationStore(ConversationStore):
    """ConversationStore backed by the Supabase conversations/messages tables."""

    def __init__(self, client: Client | None = None):
        self.conversations = ConversationsRepository(client)
        self.messages = MessagesRepository(client)

    async def find_latest_conversation(self, user_id: UUID, file_id: str) -> Conversation | None:
        row = await self.conversations.find_latest(user_id, file_id)
        return _conversation_from_row(row) if row else None

    async def create_conversation(self, user_id: UUID, file_id: str, title: str) -> Conversation:
        row = await self.conversations.create(
            {"user_id": str(user_id), "file_id": file_id, "title": title}
        )
        return _conversation_from_row(row)

    async def append_message(self, conversation_id: UUID, message: Message) -> None:
        await self.messages.create(
            {
                "id": str(message.id),
                "conversation_id": str(conversation_id),
                "role": message.role,
                "content": message.content,
                "chart_data": message.chart.to_wire() if message.chart else None,
                "created_at": message.created_at.isoformat(),
            }
        )

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        rows = await self.messages.list_by_conversation(conversation_id)
        return [_message_from_row(row) for row in rows]
