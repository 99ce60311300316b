"""
Chat API schemas.

Dependencies: pydantic
System role: Chat API contracts
"""

from uuid import UUID

from pydantic import Field

from ai_mentor.models.common import CamelModel
from ai_mentor.models.thread import MessageResponse


class ChatRequest(CamelModel):
    """Request schema for a mentor turn."""

    thread_id: UUID
    content: str = Field(description="Student message")
    id: UUID | None = Field(default=None, description="Optional client id for the USER message")


class ChatResponse(CamelModel):
    """Persisted question and reply of a turn."""

    user_message: MessageResponse
    mentor_message: MessageResponse

    @classmethod
    def from_result(cls, result) -> "ChatResponse":
        return cls(
            user_message=MessageResponse.from_model(result.user_message),
            mentor_message=MessageResponse.from_model(result.mentor_message),
        )
