"""
Vector search schemas.

Dependencies: pydantic
System role: Type definitions for chunk retrieval results
"""

from uuid import UUID

from pydantic import BaseModel, Field


class VectorSearchResult(BaseModel):
    """Chunk returned by similarity search or neighbour expansion."""

    chunk_id: UUID = Field(description="Chunk primary key")
    document_id: UUID = Field(description="Parent document")
    chunk_index: int = Field(description="Position within the document", ge=0)
    content: str = Field(description="Chunk text content")
    similarity_score: float = Field(
        default=0.0,
        description="Cosine similarity for seeds, 0 for neighbour-only chunks",
    )
    is_seed: bool = Field(default=False, description="Matched the query directly")

    @property
    def key(self) -> tuple[UUID, int]:
        return (self.document_id, self.chunk_index)
