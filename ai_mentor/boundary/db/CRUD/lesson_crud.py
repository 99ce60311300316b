"""
Mentor lesson CRUD operations.

Dependencies: sqlalchemy, ai_mentor.boundary.db.models
System role: Lesson context lookup for prompt rendering
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.models.lesson_model import MentorLessonModel
from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD


class LessonCRUD(BaseCRUD[MentorLessonModel]):
    """CRUD operations for MentorLessonModel."""

    def __init__(self) -> None:
        super().__init__(MentorLessonModel)

    async def get_by_lesson_id(
        self,
        session: AsyncSession,
        lesson_id: UUID,
    ) -> MentorLessonModel | None:
        """
        Retrieve the mentor configuration of an LMS lesson.

        Args:
            session: Async database session
            lesson_id: LMS lesson UUID

        Returns:
            MentorLessonModel if configured, None otherwise
        """
        stmt = select(MentorLessonModel).where(MentorLessonModel.lesson_id == lesson_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


lesson_crud = LessonCRUD()
