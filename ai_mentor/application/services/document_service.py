"""
Document service.

Ingestion-side adapter of the grounding corpus: checksum-deduplicated
registration, lesson links, chunk embedding with the retrieval model and
reference-counted unlinking.

Dependencies: ai_mentor.boundary.vdb.embeddings_wrapper, ai_mentor.boundary.db
System role: Document Store ingestion and maintenance
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.CRUD.chunk_crud import chunk_crud
from ai_mentor.boundary.db.CRUD.document_crud import document_crud, lesson_document_crud
from ai_mentor.boundary.db.models.document_model import DocumentModel, DocumentStatus
from ai_mentor.boundary.vdb.embeddings_wrapper import FixedDimensionEmbeddings
from ai_mentor.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def compute_checksum(file_name: str, content: bytes) -> str:
    """SHA-256 over the file name followed by the file bytes."""
    digest = hashlib.sha256()
    digest.update(file_name.encode("utf-8"))
    digest.update(content)
    return digest.hexdigest()


@dataclass
class RegisteredDocument:
    document: DocumentModel
    link_id: UUID
    created: bool


@dataclass
class UnlinkResult:
    document_id: UUID
    last_link: bool


class DocumentService:
    """Document registration, ingestion and unlinking."""

    def __init__(self, db: AsyncSession, embeddings: FixedDimensionEmbeddings) -> None:
        self.db = db
        self.embeddings = embeddings

    async def register_document(
        self,
        lesson_id: UUID,
        file_name: str,
        content_type: str,
        content: bytes,
        metadata: dict[str, Any] | None = None,
    ) -> RegisteredDocument:
        """
        Register a document for a lesson, reusing an identical upload.

        A FAILED document with the same checksum is replaced; a PENDING or
        READY one is linked as is.

        Returns:
            RegisteredDocument; created is False when an existing document was linked
        """
        checksum = compute_checksum(file_name, content)
        try:
            existing = await document_crud.get_by_checksum(self.db, checksum)
            if existing is not None and existing.status == DocumentStatus.FAILED:
                logger.info(
                    f"{__name__}:register_document - Replacing failed document",
                    extra={"document_id": str(existing.id)},
                )
                await document_crud.delete_by_id(self.db, existing.id)
                await self.db.flush()
                existing = None

            created = existing is None
            document = existing or await document_crud.create(
                self.db,
                checksum=checksum,
                file_name=file_name,
                content_type=content_type,
                byte_size=len(content),
                status=DocumentStatus.PENDING,
                document_metadata=metadata or {},
            )
            link = await lesson_document_crud.link(self.db, lesson_id, document.id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to register document", operation="register_document") from e

        logger.info(
            f"{__name__}:register_document - Linked document",
            extra={"document_id": str(document.id), "lesson_id": str(lesson_id), "document_created": created},
        )
        return RegisteredDocument(document=document, link_id=link.id, created=created)

    async def ingest_chunks(
        self,
        document_id: UUID,
        chunks: Sequence[str],
        chunk_metadata: Sequence[dict[str, Any]] | None = None,
    ) -> DocumentModel:
        """
        Embed and store a document's chunks, then mark it READY.

        Re-ingesting a READY document is a no-op. On failure the document is
        marked FAILED with the error message.

        Raises:
            DocumentNotFoundError: Unknown document
            ValidationError: No non-empty chunks
            DocumentProcessingError: Embedding or storage failed
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        if document.status == DocumentStatus.READY:
            return document

        texts = [text for text in chunks if text and text.strip()]
        if not texts:
            raise ValidationError("Document has no chunk text", field="chunks")
        if chunk_metadata is not None and len(chunk_metadata) != len(chunks):
            raise ValidationError("Chunk metadata does not match chunks", field="chunk_metadata")
        metadata = None
        if chunk_metadata is not None:
            metadata = [meta for text, meta in zip(chunks, chunk_metadata) if text and text.strip()]

        try:
            logger.info(f"{__name__}:ingest_chunks - Step 1: Embedding {len(texts)} chunks")
            vectors = await self.embeddings.aembed_documents(texts)
            logger.info(f"{__name__}:ingest_chunks - Step 2: Storing chunks")
            await chunk_crud.create_many(self.db, document.id, texts, vectors, metadata)
            updated = await document_crud.update_status(self.db, document.id, DocumentStatus.READY)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:ingest_chunks - FAILED: {type(e).__name__}",
                extra={"document_id": str(document_id), "error": str(e)},
            )
            await self._mark_failed(document_id, str(e))
            raise DocumentProcessingError("Document ingestion failed", document_id=str(document_id)) from e

        return updated or document

    async def _mark_failed(self, document_id: UUID, message: str) -> None:
        try:
            await document_crud.update_status(
                self.db,
                document_id,
                DocumentStatus.FAILED,
                error_message=message[:2048],
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:_mark_failed - Could not mark document failed",
                extra={"document_id": str(document_id), "error": str(e)},
            )

    async def list_lesson_documents(self, lesson_id: UUID) -> Sequence[tuple[DocumentModel, UUID]]:
        """READY documents of a lesson with their link ids."""
        return await document_crud.get_ready_for_lesson(self.db, lesson_id)

    async def delete_document_link(self, link_id: UUID) -> UnlinkResult:
        """
        Remove a lesson link; delete the document with its last link.

        Raises:
            DocumentNotFoundError: Unknown link
        """
        link = await lesson_document_crud.get_by_id(self.db, link_id)
        if link is None:
            raise DocumentNotFoundError(str(link_id))
        document_id = link.document_id

        try:
            last_link = await lesson_document_crud.count_links(self.db, document_id) == 1
            if last_link:
                await document_crud.delete_by_id(self.db, document_id)
            else:
                await lesson_document_crud.delete_by_id(self.db, link_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to delete document link", operation="delete_document_link") from e

        logger.info(
            f"{__name__}:delete_document_link - Unlinked",
            extra={"document_id": str(document_id), "last_link": last_link},
        )
        return UnlinkResult(document_id=document_id, last_link=last_link)
