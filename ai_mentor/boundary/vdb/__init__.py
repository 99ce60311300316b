"""Vector search boundary: embeddings and pgvector chunk search."""

from ai_mentor.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings
from ai_mentor.boundary.vdb.pgvector_store import PgVectorStore
from ai_mentor.boundary.vdb.vector_schemas import VectorSearchResult

__all__ = ["FixedDimensionEmbeddings", "PgVectorStore", "VectorSearchResult"]
