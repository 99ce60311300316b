"""
Thread and message API schemas.

Dependencies: pydantic
System role: Thread API contracts
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from ai_mentor.boundary.db.models.thread_model import MessageRole, ThreadStatus
from ai_mentor.core.agentic_system.mentor.mentor_schema import to_presentation_role
from ai_mentor.models.common import CamelModel


class CreateThreadRequest(CamelModel):
    """Request schema for opening a mentor thread."""

    lesson_id: UUID
    user_language: str = Field(default="English", min_length=1, max_length=64)


class ThreadResponse(CamelModel):
    """Mentor thread."""

    id: UUID
    lesson_id: UUID
    user_id: UUID
    user_language: str
    status: ThreadStatus
    created_at: datetime
    updated_at: datetime


class MessageResponse(CamelModel):
    """Stored message in its presentation form."""

    id: UUID
    thread_id: UUID
    role: MessageRole
    content: str
    token_count: int
    archived: bool
    created_at: datetime

    @classmethod
    def from_model(cls, message) -> "MessageResponse":
        response = cls.model_validate(message)
        response.role = to_presentation_role(message.role)
        return response
