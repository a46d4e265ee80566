"""
TableTalk Conversations - Storage interface.

The conversation manager treats storage as a durable, creation-ordered
collaborator. Implementations:
- InMemoryConversationStore (dev / tests)
- SupabaseConversationStore (repository.py)
"""

from abc import ABC, abstractmethod
from threading import RLock
from uuid import UUID

from tabletalk.modules.conversations.schemas import Conversation, Message


class ConversationStore(ABC):
    """Persistence collaborator for conversations and messages."""

    @abstractmethod
    async def find_latest_conversation(self, user_id: UUID, file_id: str) -> Conversation | None:
        """Most recently created conversation for (user, file), if any."""
        ...

    @abstractmethod
    async def create_conversation(self, user_id: UUID, file_id: str, title: str) -> Conversation:
        """Create and return a new conversation."""
        ...

    @abstractmethod
    async def append_message(self, conversation_id: UUID, message: Message) -> None:
        """Persist one message."""
        ...

    @abstractmethod
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """Messages ordered by created_at ascending (ties: insertion order)."""
        ...


class InMemoryConversationStore(ConversationStore):
    """Storage temporal en memoria."""

    def __init__(self):
        self._lock = RLock()
        self._conversations: list[Conversation] = []
        self._messages: dict[UUID, list[Message]] = {}

    async def find_latest_conversation(self, user_id: UUID, file_id: str) -> Conversation | None:
        with self._lock:
            latest = None
            for conv in self._conversations:
                if conv.user_id == user_id and conv.file_id == file_id:
                    if latest is None or conv.created_at >= latest.created_at:
                        latest = conv
            return latest

    async def create_conversation(self, user_id: UUID, file_id: str, title: str) -> Conversation:
        conversation = Conversation(user_id=user_id, file_id=file_id, title=title)
        with self._lock:
            self._conversations.append(conversation)
            self._messages[conversation.id] = []
        return conversation

    async def append_message(self, conversation_id: UUID, message: Message) -> None:
        with self._lock:
            self._messages.setdefault(conversation_id, []).append(message.with_status("confirmed"))

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        with self._lock:
            stored = list(self._messages.get(conversation_id, []))
        return sorted(stored, key=lambda m: m.created_at)
