"""
Thread and message ORM models.

A thread is one student's mentor conversation within a lesson. Messages
are typed by role, append-only and archived (never deleted) when folded
into the running summary.

Dependencies: sqlalchemy, ai_mentor.boundary.db.base
System role: Conversation persistence for the mentor pipeline
"""

import enum
from uuid import UUID

from sqlalchemy import String, Text, Integer, Boolean, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

from ai_mentor.boundary.db.base import Base, UUIDMixin, TimestampMixin, CreatedAtMixin


class ThreadStatus(str, enum.Enum):
    """
    Thread lifecycle states.

    ACTIVE: Student may chat; judge may run
    COMPLETED: Judged or explicitly completed; read-only
    """

    ACTIVE = "active"
    COMPLETED = "completed"


class MessageRole(str, enum.Enum):
    """
    Author and purpose of a stored message.

    SYSTEM: Rendered mentor system prompt (one live row per thread)
    SUMMARY: Running summary of archived history (at most one live row)
    USER: Student turn
    MENTOR: Assistant turn
    """

    SYSTEM = "system"
    SUMMARY = "summary"
    USER = "user"
    MENTOR = "mentor"


class ThreadModel(Base, UUIDMixin, TimestampMixin):
    """
    Mentor conversation of one user in one lesson.

    Attributes:
        lesson_id: LMS lesson id
        user_id: Owner of the thread
        user_language: Language the mentor replies in
        status: ACTIVE until judged or completed

    Relationships:
        messages: One-to-many with MessageModel (cascade delete)
    """

    __tablename__ = "mentor_threads"
    __table_args__ = (Index("ix_mentor_threads_lesson_user", "lesson_id", "user_id"),)

    lesson_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    user_language: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="English",
    )
    status: Mapped[ThreadStatus] = mapped_column(
        Enum(ThreadStatus, native_enum=False),
        nullable=False,
        default=ThreadStatus.ACTIVE,
    )

    messages = relationship(
        "MessageModel",
        back_populates="thread",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MessageModel(Base, UUIDMixin, CreatedAtMixin):
    """
    One message of a mentor thread.

    token_count is computed once at write time with the model in effect and
    never recomputed.

    Attributes:
        thread_id: Parent thread (cascade delete)
        role: SYSTEM, SUMMARY, USER or MENTOR
        content: Message text
        token_count: Tokens of content for the model that produced or consumed it
        archived: True once folded into a summary
    """

    __tablename__ = "mentor_thread_messages"
    __table_args__ = (
        Index("ix_mentor_thread_messages_thread_live", "thread_id", "archived", "role"),
    )

    thread_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("mentor_threads.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[MessageRole] = mapped_column(
        Enum(MessageRole, native_enum=False),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    archived: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Excluded from prompts and budget sums once summarized",
    )

    thread = relationship("ThreadModel", back_populates="messages")
