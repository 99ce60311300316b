"""
Document and lesson link CRUD operations.

Dependencies: sqlalchemy, ai_mentor.boundary.db.models
System role: Grounding corpus bookkeeping
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    LessonDocumentModel,
)
from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """CRUD operations for DocumentModel."""

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def get_by_checksum(
        self,
        session: AsyncSession,
        checksum: str,
    ) -> DocumentModel | None:
        """Find an already registered document by content checksum."""
        stmt = select(DocumentModel).where(DocumentModel.checksum == checksum)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: DocumentStatus,
        error_message: str | None = None,
    ) -> DocumentModel | None:
        """
        Update document ingestion status.

        Args:
            session: Async database session
            id: Document UUID
            status: New ingestion status
            error_message: Error details if status is FAILED

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        update_fields = {"status": status, "error_message": error_message}
        return await self.update_by_id(session, id, **update_fields)

    async def get_ready_for_lesson(
        self,
        session: AsyncSession,
        lesson_id: UUID,
    ) -> Sequence[tuple[DocumentModel, UUID]]:
        """
        List READY documents linked to a lesson.

        Returns:
            Sequence of (document, link_id) ordered by link creation
        """
        stmt = (
            select(DocumentModel, LessonDocumentModel.id)
            .join(LessonDocumentModel, LessonDocumentModel.document_id == DocumentModel.id)
            .where(
                LessonDocumentModel.lesson_id == lesson_id,
                DocumentModel.status == DocumentStatus.READY,
            )
            .order_by(LessonDocumentModel.created_at)
        )
        result = await session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]


class LessonDocumentCRUD(BaseCRUD[LessonDocumentModel]):
    """CRUD operations for LessonDocumentModel."""

    def __init__(self) -> None:
        super().__init__(LessonDocumentModel)

    async def link(
        self,
        session: AsyncSession,
        lesson_id: UUID,
        document_id: UUID,
    ) -> LessonDocumentModel:
        """Return the lesson/document link, creating it when missing."""
        stmt = select(LessonDocumentModel).where(
            LessonDocumentModel.lesson_id == lesson_id,
            LessonDocumentModel.document_id == document_id,
        )
        result = await session.execute(stmt)
        existing = result.scalar_one_or_none()
        if existing is not None:
            return existing
        return await self.create(session, lesson_id=lesson_id, document_id=document_id)

    async def count_links(self, session: AsyncSession, document_id: UUID) -> int:
        """Number of lessons a document is linked to."""
        stmt = select(func.count()).where(LessonDocumentModel.document_id == document_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())


document_crud = DocumentCRUD()
lesson_document_crud = LessonDocumentCRUD()
