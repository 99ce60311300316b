"""
Document, chunk and lesson link ORM models.

Documents are deduplicated by checksum and shared between lessons through
link rows. Chunks hold the embedded text used for retrieval.

Dependencies: sqlalchemy, pgvector, ai_mentor.boundary.db.base
System role: Grounding corpus persistence
"""

import enum
from uuid import UUID

from pgvector.sqlalchemy import Vector
from sqlalchemy import String, Text, Integer, BigInteger, JSON, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID as PG_UUID

from ai_mentor.boundary.db.base import Base, UUIDMixin, TimestampMixin, CreatedAtMixin
from ai_mentor.configs import get_settings


class DocumentStatus(str, enum.Enum):
    """
    Document ingestion lifecycle states.

    PENDING: Registered, chunks not yet embedded
    READY: Chunks embedded; document participates in retrieval
    FAILED: Ingestion error; error_message holds details
    """

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Ingested course document.

    Attributes:
        checksum: SHA-256 of file name and bytes (unique)
        file_name: Original file name
        content_type: MIME type
        byte_size: Size of the uploaded file
        status: PENDING, READY or FAILED
        error_message: Failure reason when FAILED
        document_metadata: Free-form producer metadata

    Relationships:
        chunks: One-to-many with DocumentChunkModel (cascade delete)
        lesson_links: One-to-many with LessonDocumentModel (cascade delete)
    """

    __tablename__ = "documents"

    checksum: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(127), nullable=False)
    byte_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    error_message: Mapped[str | None] = mapped_column(String(2048), nullable=True, default=None)
    document_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    chunks = relationship(
        "DocumentChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    lesson_links = relationship(
        "LessonDocumentModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DocumentChunkModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Immutable embedded slice of a document.

    chunk_index is contiguous from 0 within a document; neighbour expansion
    during retrieval walks it without crossing documents.

    Attributes:
        document_id: Parent document (cascade delete)
        chunk_index: Position within the document
        content: Chunk text
        embedding: Vector of LLM_EMBEDDING_DIMENSION floats (JSON on SQLite)
        chunk_metadata: Producer metadata (page, heading, ...)
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),
    )

    document_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(
        Vector(get_settings().llm.embedding_dimension).with_variant(JSON(), "sqlite"),
        nullable=False,
    )
    chunk_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    document = relationship("DocumentModel", back_populates="chunks")


class LessonDocumentModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Many-to-many link between a lesson and a document.

    Deleting the last link of a document deletes the document.
    """

    __tablename__ = "lesson_documents"
    __table_args__ = (
        UniqueConstraint("lesson_id", "document_id", name="uq_lesson_documents_pair"),
    )

    lesson_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    document_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    document = relationship("DocumentModel", back_populates="lesson_links")
