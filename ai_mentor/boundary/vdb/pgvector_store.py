"""
pgvector-backed chunk store.

Embeds queries with the shared embedding model and runs lesson-scoped
similarity search and neighbour lookups over document_chunks. Queries are
embedded up front; similarity_search takes the precomputed vector.

Dependencies: ai_mentor.boundary.vdb.embeddings_wrapper, ai_mentor.boundary.db.CRUD
System role: Vector store adapter for the Retrieval Service
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from ai_mentor.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings
from ai_mentor.boundary.vdb.vector_schemas import VectorSearchResult

logger = logging.getLogger(__name__)


class PgVectorStore:
    """Similarity search over lesson-linked document chunks."""

    def __init__(self, embeddings: FixedDimensionEmbeddings, crud: ChunkCRUD = chunk_crud) -> None:
        self._embeddings = embeddings
        self._crud = crud

    async def embed_query(self, query: str) -> list[float]:
        """
        Embed a search query with the shared embedding model.

        Raises:
            EmbeddingError: If the query cannot be embedded
        """
        return await self._embeddings.aembed_query(query)

    async def similarity_search(
        self,
        db: AsyncSession,
        embedding: list[float],
        lesson_id: UUID,
        k: int,
        similarity_threshold: float,
    ) -> list[VectorSearchResult]:
        """Top-k chunks of the lesson's READY documents above the threshold."""
        rows = await self._crud.search_similar(
            db,
            lesson_id=lesson_id,
            embedding=embedding,
            top_k=k,
            similarity_threshold=similarity_threshold,
        )
        logger.debug(
            f"{__name__}:similarity_search - Retrieved {len(rows)} seeds",
            extra={"lesson_id": str(lesson_id), "k": k},
        )
        return [
            VectorSearchResult(
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                content=chunk.content,
                similarity_score=score,
                is_seed=True,
            )
            for chunk, score in rows
        ]

    async def get_neighbours(
        self,
        db: AsyncSession,
        windows: Sequence[tuple[UUID, int, int]],
    ) -> list[VectorSearchResult]:
        """Chunks inside inclusive (document_id, low, high) index windows."""
        chunks = await self._crud.get_windows(db, windows)
        return [
            VectorSearchResult(
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                content=chunk.content,
            )
            for chunk in chunks
        ]
