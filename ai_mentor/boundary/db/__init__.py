"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - Thread, message, lesson and document models with their enums
  - CRUD singletons

Dependencies: sqlalchemy, pgvector, ai_mentor.configs
System role: Database adapter for mentor threads and the grounding corpus
"""

from ai_mentor.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from ai_mentor.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from ai_mentor.boundary.db.models import (
    DocumentChunkModel,
    DocumentModel,
    DocumentStatus,
    LessonDocumentModel,
    MentorLessonModel,
    MessageModel,
    MessageRole,
    ThreadModel,
    ThreadStatus,
)

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "DocumentChunkModel",
    "DocumentModel",
    "DocumentStatus",
    "LessonDocumentModel",
    "MentorLessonModel",
    "MessageModel",
    "MessageRole",
    "ThreadModel",
    "ThreadStatus",
]
