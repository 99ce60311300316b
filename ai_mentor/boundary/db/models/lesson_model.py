"""
Mentor lesson ORM model.

Lesson context supplied by the LMS lesson service: the objectives the
mentor teaches towards and the completion conditions the judge checks.

Dependencies: sqlalchemy, ai_mentor.boundary.db.base
System role: Lesson context for system and judge prompts
"""

from uuid import UUID

from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

from ai_mentor.boundary.db.base import Base, UUIDMixin, TimestampMixin


class MentorLessonModel(Base, UUIDMixin, TimestampMixin):
    """
    AI mentor configuration of a lesson.

    Attributes:
        lesson_id: LMS lesson id (unique)
        name: Internal lesson name
        title: Title shown to the student and used in prompts
        instructions: What the mentor should help the student achieve
        completion_conditions: Criteria the judge scores against
        target_groups: [{"name": ..., "characteristic": ...}] audience profiles
    """

    __tablename__ = "mentor_lessons"

    lesson_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instructions: Mapped[str] = mapped_column(Text, nullable=False, default="")
    completion_conditions: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        doc="Conditions a student must meet for the lesson to count as passed",
    )
    target_groups: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Audience profiles rendered into the mentor system prompt",
    )
