"""ORM models for mentor threads, lessons and the grounding corpus."""

from ai_mentor.boundary.db.models.lesson_model import MentorLessonModel
from ai_mentor.boundary.db.models.thread_model import (
    MessageModel,
    MessageRole,
    ThreadModel,
    ThreadStatus,
)
from ai_mentor.boundary.db.models.document_model import (
    DocumentChunkModel,
    DocumentModel,
    DocumentStatus,
    LessonDocumentModel,
)

__all__ = [
    "MentorLessonModel",
    "ThreadModel",
    "ThreadStatus",
    "MessageModel",
    "MessageRole",
    "DocumentModel",
    "DocumentStatus",
    "DocumentChunkModel",
    "LessonDocumentModel",
]
