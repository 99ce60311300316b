"""
Document chunk CRUD operations.

Bulk insert of embedded chunks and the two retrieval queries: cosine
similarity search scoped to a lesson's READY documents, and neighbour
window lookup by chunk index.

Dependencies: sqlalchemy, pgvector, ai_mentor.boundary.db.models
System role: Vector search over the grounding corpus
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.models.document_model import (
    DocumentChunkModel,
    DocumentModel,
    DocumentStatus,
    LessonDocumentModel,
)
from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD


class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        super().__init__(DocumentChunkModel)

    async def create_many(
        self,
        session: AsyncSession,
        document_id: UUID,
        contents: Sequence[str],
        embeddings: Sequence[list[float]],
        metadata: Sequence[dict[str, Any]] | None = None,
    ) -> list[DocumentChunkModel]:
        """
        Insert the chunks of a document with contiguous indices from 0.

        Args:
            session: Async database session
            document_id: Parent document UUID
            contents: Chunk texts in document order
            embeddings: One vector per chunk
            metadata: Optional per-chunk metadata

        Returns:
            Created chunks in index order
        """
        if len(contents) != len(embeddings):
            raise ValueError("contents and embeddings must have the same length")
        metadata = metadata or [{} for _ in contents]
        chunks = [
            DocumentChunkModel(
                document_id=document_id,
                chunk_index=index,
                content=content,
                embedding=list(embedding),
                chunk_metadata=meta,
            )
            for index, (content, embedding, meta) in enumerate(zip(contents, embeddings, metadata))
        ]
        session.add_all(chunks)
        await session.flush()
        return chunks

    def similarity_query(
        self,
        lesson_id: UUID,
        embedding: list[float],
        top_k: int,
        similarity_threshold: float,
    ) -> Select:
        """
        Top-K chunks of a lesson's READY documents by cosine similarity.

        Similarity is 1 - cosine distance; only chunks strictly above the
        threshold are selected. Rows are (chunk, similarity).
        """
        distance = DocumentChunkModel.embedding.cosine_distance(embedding)
        similarity = (1 - distance).label("similarity")
        return (
            select(DocumentChunkModel, similarity)
            .join(DocumentModel, DocumentModel.id == DocumentChunkModel.document_id)
            .join(LessonDocumentModel, LessonDocumentModel.document_id == DocumentModel.id)
            .where(
                LessonDocumentModel.lesson_id == lesson_id,
                DocumentModel.status == DocumentStatus.READY,
                (1 - distance) > similarity_threshold,
            )
            .order_by(distance)
            .limit(top_k)
        )

    async def search_similar(
        self,
        session: AsyncSession,
        lesson_id: UUID,
        embedding: list[float],
        top_k: int,
        similarity_threshold: float,
    ) -> list[tuple[DocumentChunkModel, float]]:
        """
        Run the lesson-scoped similarity query.

        Returns:
            List of (chunk, similarity), most similar first
        """
        stmt = self.similarity_query(lesson_id, embedding, top_k, similarity_threshold)
        result = await session.execute(stmt)
        return [(row[0], float(row[1])) for row in result.all()]

    async def get_windows(
        self,
        session: AsyncSession,
        windows: Sequence[tuple[UUID, int, int]],
    ) -> Sequence[DocumentChunkModel]:
        """
        Fetch chunks inside [low, high] index windows of given documents.

        Args:
            session: Async database session
            windows: (document_id, low_index, high_index) triples, bounds inclusive

        Returns:
            Matching chunks ordered by document and index
        """
        if not windows:
            return []
        clauses = [
            and_(
                DocumentChunkModel.document_id == document_id,
                DocumentChunkModel.chunk_index.between(low, high),
            )
            for document_id, low, high in windows
        ]
        stmt = (
            select(DocumentChunkModel)
            .where(or_(*clauses))
            .order_by(DocumentChunkModel.document_id, DocumentChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


chunk_crud = ChunkCRUD()
