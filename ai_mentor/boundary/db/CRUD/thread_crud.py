"""
Thread CRUD operations.

Dependencies: sqlalchemy, ai_mentor.boundary.db.models
System role: Thread persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.models.thread_model import ThreadModel, ThreadStatus
from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD


class ThreadCRUD(BaseCRUD[ThreadModel]):
    """CRUD operations for ThreadModel."""

    def __init__(self) -> None:
        super().__init__(ThreadModel)

    async def get_by_lesson_and_user(
        self,
        session: AsyncSession,
        lesson_id: UUID,
        user_id: UUID,
    ) -> Sequence[ThreadModel]:
        """
        List a user's threads for a lesson, oldest first.

        Args:
            session: Async database session
            lesson_id: LMS lesson UUID
            user_id: Thread owner

        Returns:
            Sequence of ThreadModel
        """
        stmt = (
            select(ThreadModel)
            .where(ThreadModel.lesson_id == lesson_id, ThreadModel.user_id == user_id)
            .order_by(ThreadModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: ThreadStatus,
    ) -> ThreadModel | None:
        """Set the lifecycle status of a thread."""
        return await self.update_by_id(session, id, status=status)


thread_crud = ThreadCRUD()
