"""
Retrieval service for lesson-grounded context.

Embeds the query, takes the top-K chunks of the lesson's documents above
the similarity threshold, widens each seed with its neighbours in the same
document and returns the union as SYSTEM prompt entries. Any embedding or
search failure degrades to an empty context.

Dependencies: ai_mentor.boundary.vdb, ai_mentor.configs
System role: Retrieval Service
"""

import logging
import math
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.models.thread_model import MessageRole
from ai_mentor.boundary.vdb.pgvector_store import PgVectorStore
from ai_mentor.boundary.vdb.vector_schemas import VectorSearchResult
from ai_mentor.configs.mentor import MentorSettings
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry, RETRIEVAL_SOURCE
from ai_mentor.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


def neighbour_radius(neighbour_count: int) -> int:
    """Chunks taken on each side of a seed."""
    return math.ceil(neighbour_count / 2) if neighbour_count > 0 else 0


def merge_results(
    seeds: list[VectorSearchResult],
    neighbours: list[VectorSearchResult],
) -> list[VectorSearchResult]:
    """
    Union seeds and neighbours without duplicates.

    A chunk that is both a seed and a neighbour keeps its seed score.
    Ordered by score descending, then document and chunk index.
    """
    merged: dict[tuple[UUID, int], VectorSearchResult] = {}
    for result in seeds:
        current = merged.get(result.key)
        if current is None or result.similarity_score > current.similarity_score:
            merged[result.key] = result
    for result in neighbours:
        merged.setdefault(result.key, result)
    return sorted(
        merged.values(),
        key=lambda r: (-r.similarity_score, r.document_id, r.chunk_index),
    )


def to_context_entry(result: VectorSearchResult) -> PromptEntry:
    content = (
        f'<retrieved_context document_id="{result.document_id}" chunk_index="{result.chunk_index}">\n'
        f"{result.content}\n"
        "</retrieved_context>"
    )
    return PromptEntry(
        id=str(result.chunk_id),
        role=MessageRole.SYSTEM,
        content=content,
        source=RETRIEVAL_SOURCE,
    )


class RetrievalService:
    """Lesson-scoped retrieval with neighbour expansion."""

    def __init__(
        self,
        db: AsyncSession,
        vector_store: PgVectorStore,
        settings: MentorSettings,
    ) -> None:
        self.db = db
        self.vector_store = vector_store
        self.settings = settings

    async def get_context(
        self,
        query_text: str,
        lesson_id: UUID,
        neighbour_count: int | None = None,
    ) -> list[PromptEntry]:
        """
        Retrieve grounding context for a query.

        Args:
            query_text: Text to embed and search with
            lesson_id: Lesson whose linked documents are searched
            neighbour_count: Neighbour window, defaults to MENTOR_CHUNK_NEIGHBOURS

        Returns:
            SYSTEM-role entries tagged as retrieved context, possibly empty
        """
        if neighbour_count is None:
            neighbour_count = self.settings.chunk_neighbours
        radius = neighbour_radius(neighbour_count)

        try:
            embedding = await self.vector_store.embed_query(query_text)
            async with self.db.begin_nested():
                seeds = await self.vector_store.similarity_search(
                    self.db,
                    embedding=embedding,
                    lesson_id=lesson_id,
                    k=self.settings.top_k,
                    similarity_threshold=self.settings.similarity_threshold,
                )
                neighbours: list[VectorSearchResult] = []
                if seeds and radius:
                    windows = [
                        (seed.document_id, max(0, seed.chunk_index - radius), seed.chunk_index + radius)
                        for seed in seeds
                    ]
                    neighbours = await self.vector_store.get_neighbours(self.db, windows)
        except (EmbeddingError, SQLAlchemyError) as e:
            logger.warning(
                f"{__name__}:get_context - Retrieval degraded, continuing without context",
                extra={"lesson_id": str(lesson_id), "error": str(e)},
            )
            return []

        results = merge_results(seeds, neighbours)
        logger.info(
            f"{__name__}:get_context - Retrieved {len(results)} chunks",
            extra={"lesson_id": str(lesson_id), "seeds": len(seeds), "radius": radius},
        )
        return [to_context_entry(result) for result in results]
