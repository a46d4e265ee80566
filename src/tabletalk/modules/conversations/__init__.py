"""TableTalk Conversations Module - Chat history per dataset."""

from tabletalk.modules.conversations.service import ConversationManager
from tabletalk.modules.conversations.store import ConversationStore, InMemoryConversationStore

__all__ = ["ConversationManager", "ConversationStore", "InMemoryConversationStore"]
