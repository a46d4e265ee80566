"""
TableTalk Conversations - Conversation Manager.

Keeps the ordered message history of one dataset session and wraps each
QueryOrchestrator call with the user/assistant turns.

State per (user, file): NoConversation -> Active. There is no way back
within a session; another file is another scope.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from tabletalk.core.orchestrator import QueryOrchestrator
from tabletalk.core.tabular_parser import TabularDataset
from tabletalk.exceptions import (
    ConversationBusyError,
    ConversationNotOpenError,
    TableTalkException,
    ValidationException,
)
from tabletalk.modules.conversations.schemas import Conversation, Message, MessageRole
from tabletalk.modules.conversations.store import ConversationStore
from tabletalk.schemas import ChartSpec

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I encountered an error: {message}"


@dataclass
class ConversationSession:
    """Active conversation for one file, plus the dataset it talks about."""
    conversation: Conversation
    file_name: str
    dataset: TabularDataset
    summary: str
    messages: list[Message] = field(default_factory=list)
    busy: bool = False


@dataclass(frozen=True)
class Turn:
    """One question and its reply, as they ended up in the history."""
    question: Message
    reply: Message


# Per-user session state survives across requests: {user_id: {file_id: session}}
_user_sessions: dict[str, dict[str, ConversationSession]] = {}


def sessions_for(user_id: UUID | str) -> dict[str, ConversationSession]:
    return _user_sessions.setdefault(str(user_id), {})


def reset_sessions() -> None:
    _user_sessions.clear()


class ConversationManager:
    """Conversation Manager for a single user."""

    def __init__(
        self,
        orchestrator: QueryOrchestrator,
        store: ConversationStore,
        user_id: UUID,
        sessions: dict[str, ConversationSession] | None = None,
    ):
        self.orchestrator = orchestrator
        self.store = store
        self.user_id = user_id
        self.sessions = sessions if sessions is not None else {}

    # -------------------------------------------------------------------------
    # Open
    # -------------------------------------------------------------------------

    async def open(
        self,
        file_id: str,
        *,
        file_name: str,
        dataset: TabularDataset,
        summary: str = "",
    ) -> ConversationSession:
        """
        Activate the conversation for a file.

        Reuses the most recently created conversation for (user, file) or
        creates one. History is loaded ordered by created_at ascending.
        """
        conversation = await self.store.find_latest_conversation(self.user_id, file_id)
        if conversation is None:
            conversation = await self.store.create_conversation(
                self.user_id, file_id, f"Chat about {file_name}"
            )
            logger.info(f"[conversations] Created conversation {conversation.id} for file {file_id}")

        current = self.sessions.get(file_id)
        if current is not None and current.conversation.id == conversation.id:
            # Keep the in-memory history: it also holds messages whose write failed.
            current.file_name = file_name
            current.dataset = dataset
            current.summary = summary or ""
            return current

        messages = await self.store.list_messages(conversation.id)
        session = ConversationSession(
            conversation=conversation,
            file_name=file_name,
            dataset=dataset,
            summary=summary or "",
            messages=messages,
        )
        self.sessions[file_id] = session
        logger.info(
            f"[conversations] Opened {conversation.id} for file {file_id} ({len(messages)} messages)"
        )
        return session

    def get_session(self, file_id: str) -> ConversationSession:
        session = self.sessions.get(file_id)
        if session is None:
            raise ConversationNotOpenError(file_id)
        return session

    def history(self, file_id: str) -> list[Message]:
        """Ordered history of the active conversation for a file."""
        return list(self.get_session(file_id).messages)

    def forget(self, file_id: str) -> None:
        """Drop the session for a file that no longer exists."""
        self.sessions.pop(file_id, None)

    # -------------------------------------------------------------------------
    # Ask
    # -------------------------------------------------------------------------

    async def ask(self, file_id: str, question: str) -> Turn:
        """
        Ask a question in the active conversation for a file.

        The user turn is appended (and persisted) before the reasoning call.
        Orchestration failures become the assistant's reply; only a missing
        session, an empty question, a busy conversation, or a missing login
        are raised to the caller.
        """
        session = self.get_session(file_id)

        question = (question or "").strip()
        if not question:
            raise ValidationException("Question must not be empty")
        if session.busy:
            raise ConversationBusyError(session.conversation.id)

        self.orchestrator.ensure_authenticated()

        session.busy = True
        try:
            asked = await self._append(session, "user", question)

            try:
                result = await self.orchestrator.answer_question(
                    question,
                    session.dataset.columns,
                    session.dataset,
                    session.summary,
                )
                reply = await self._append(session, "assistant", result.answer, result.chart)
            except TableTalkException as e:
                logger.warning(f"[conversations] {session.conversation.id}: {e.code} - {e.message}")
                reply = await self._append(session, "assistant", ERROR_REPLY.format(message=e.message))

            return Turn(question=asked, reply=reply)
        finally:
            session.busy = False

    async def _append(
        self,
        session: ConversationSession,
        role: MessageRole,
        content: str,
        chart: ChartSpec | None = None,
    ) -> Message:
        """Show the message at once, then persist it and record the outcome."""
        pending = Message(
            conversation_id=session.conversation.id,
            role=role,
            content=content,
            chart=chart,
        )
        session.messages.append(pending)
        index = len(session.messages) - 1

        try:
            await self.store.append_message(session.conversation.id, pending)
            settled = pending.with_status("confirmed")
        except Exception as e:
            logger.warning(
                f"[conversations] Failed to persist {role} message in {session.conversation.id}: {e}"
            )
            settled = pending.with_status("failed")

        session.messages[index] = settled
        return settled
