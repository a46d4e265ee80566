"""
TableTalk Conversations - Schemas.

Pydantic models for conversations, messages, and chat operations.
"""

from datetime import datetime, timezone
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from tabletalk.schemas import ChartSpec

MessageRole = Literal["user", "assistant"]
MessageStatus = Literal["pending", "confirmed", "failed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Domain
# =============================================================================


class Conversation(BaseModel):
    """Message history scope for one (user, file)."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    file_id: str
    title: str
    created_at: datetime = Field(default_factory=_utcnow)


class Message(BaseModel):
    """
    One chat turn. Immutable: status changes produce a new copy.

    pending   -> shown to the user, not yet persisted
    confirmed -> persisted
    failed    -> persistence failed (still shown)
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    conversation_id: UUID
    role: MessageRole
    content: str
    chart: ChartSpec | None = None
    status: MessageStatus = "pending"
    created_at: datetime = Field(default_factory=_utcnow)

    def with_status(self, status: MessageStatus) -> "Message":
        return self.model_copy(update={"status": status})


# =============================================================================
# Request Schemas
# =============================================================================


class AskRequest(BaseModel):
    """Ask a question about the open dataset."""

    question: str = Field(..., min_length=1, max_length=4000)


# =============================================================================
# Response Schemas
# =============================================================================


class MessageResponse(BaseModel):
    """Message as returned by the API (chart in wire shape)."""

    id: UUID
    role: MessageRole
    content: str
    chart_data: dict[str, Any] | None = None
    status: MessageStatus
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            chart_data=message.chart.to_wire() if message.chart else None,
            status=message.status,
            created_at=message.created_at,
        )


class ConversationResponse(BaseModel):
    """Conversation with its ordered history."""

    id: UUID
    file_id: str
    title: str
    created_at: datetime
    messages: list[MessageResponse] = Field(default_factory=list)


class AskResponse(BaseModel):
    """Both halves of one exchange."""

    conversation_id: UUID
    user_message: MessageResponse
    assistant_message: MessageResponse
