"""
Test suite for DocumentService.

System role: Verification of document registration, ingestion and unlinking
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.document_service import DocumentService, compute_checksum
from ai_mentor.boundary.db.CRUD.document_crud import document_crud, lesson_document_crud
from ai_mentor.boundary.db.models import DocumentStatus
from ai_mentor.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingError,
    ValidationError,
)

DIMENSIONS = 4


@pytest.fixture
def mock_embeddings() -> MagicMock:
    embeddings = MagicMock()
    embeddings.aembed_documents = AsyncMock(
        side_effect=lambda texts: [[0.1] * DIMENSIONS for _ in texts]
    )
    return embeddings


@pytest.fixture
def document_service(test_async_db: AsyncSession, mock_embeddings: MagicMock) -> DocumentService:
    return DocumentService(db=test_async_db, embeddings=mock_embeddings)


class TestChecksum:
    """Test suite for compute_checksum()."""

    def test_name_is_part_of_checksum(self) -> None:
        assert compute_checksum("a.txt", b"x") != compute_checksum("b.txt", b"x")
        assert compute_checksum("a.txt", b"x") == compute_checksum("a.txt", b"x")


class TestRegisterDocument:
    """Test suite for DocumentService.register_document()."""

    @pytest.mark.asyncio
    async def test_identical_upload_is_reused(
        self, document_service: DocumentService, test_async_db: AsyncSession
    ) -> None:
        """Test a second lesson links the existing document."""
        # Arrange
        first_lesson, second_lesson = uuid.uuid4(), uuid.uuid4()

        # Act
        first = await document_service.register_document(first_lesson, "notes.txt", "text/plain", b"halves")
        second = await document_service.register_document(second_lesson, "notes.txt", "text/plain", b"halves")

        # Assert
        assert first.created is True
        assert second.created is False
        assert second.document.id == first.document.id
        assert first.document.status == DocumentStatus.PENDING
        assert first.document.byte_size == 6
        assert await lesson_document_crud.count_links(test_async_db, first.document.id) == 2

    @pytest.mark.asyncio
    async def test_failed_document_is_replaced(
        self, document_service: DocumentService, test_async_db: AsyncSession
    ) -> None:
        # Arrange
        lesson_id = uuid.uuid4()
        first = await document_service.register_document(lesson_id, "notes.txt", "text/plain", b"halves")
        failed_id = first.document.id
        await document_crud.update_status(test_async_db, failed_id, DocumentStatus.FAILED, error_message="boom")
        await test_async_db.commit()

        # Act
        second = await document_service.register_document(lesson_id, "notes.txt", "text/plain", b"halves")

        # Assert
        assert second.created is True
        assert second.document.id != failed_id
        assert await document_crud.get_by_id(test_async_db, failed_id) is None


class TestIngestChunks:
    """Test suite for DocumentService.ingest_chunks()."""

    @pytest.mark.asyncio
    async def test_ingest_marks_ready(
        self, document_service: DocumentService, test_async_db: AsyncSession, mock_embeddings: MagicMock
    ) -> None:
        """Test blank chunks are skipped and the document becomes READY."""
        # Arrange
        lesson_id = uuid.uuid4()
        registered = await document_service.register_document(lesson_id, "n.txt", "text/plain", b"abc")

        # Act
        document = await document_service.ingest_chunks(registered.document.id, ["first", "  ", "second"])

        # Assert
        assert document.status == DocumentStatus.READY
        mock_embeddings.aembed_documents.assert_awaited_once_with(["first", "second"])
        ready = await document_service.list_lesson_documents(lesson_id)
        assert [(doc.id, link_id) for doc, link_id in ready] == [(document.id, registered.link_id)]

    @pytest.mark.asyncio
    async def test_ready_document_is_not_reingested(
        self, document_service: DocumentService, mock_embeddings: MagicMock
    ) -> None:
        # Arrange
        registered = await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")
        await document_service.ingest_chunks(registered.document.id, ["first"])

        # Act
        await document_service.ingest_chunks(registered.document.id, ["first"])

        # Assert
        assert mock_embeddings.aembed_documents.await_count == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_marks_failed(
        self, document_service: DocumentService, test_async_db: AsyncSession, mock_embeddings: MagicMock
    ) -> None:
        # Arrange
        registered = await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")
        document_id = registered.document.id
        mock_embeddings.aembed_documents.side_effect = EmbeddingError("quota", operation="embed_documents")

        # Act & Assert
        with pytest.raises(DocumentProcessingError):
            await document_service.ingest_chunks(document_id, ["first"])

        stored = await document_crud.get_by_id(test_async_db, document_id)
        assert stored.status == DocumentStatus.FAILED
        assert "quota" in stored.error_message

    @pytest.mark.asyncio
    async def test_no_text(self, document_service: DocumentService) -> None:
        # Arrange
        registered = await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")

        # Act & Assert
        with pytest.raises(ValidationError):
            await document_service.ingest_chunks(registered.document.id, ["", " "])

    @pytest.mark.asyncio
    async def test_unknown_document(self, document_service: DocumentService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await document_service.ingest_chunks(uuid.uuid4(), ["x"])


class TestDeleteDocumentLink:
    """Test suite for DocumentService.delete_document_link()."""

    @pytest.mark.asyncio
    async def test_shared_document_survives(
        self, document_service: DocumentService, test_async_db: AsyncSession
    ) -> None:
        # Arrange
        first = await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")
        await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")

        # Act
        result = await document_service.delete_document_link(first.link_id)

        # Assert
        assert result.last_link is False
        assert await document_crud.get_by_id(test_async_db, first.document.id) is not None
        assert await lesson_document_crud.count_links(test_async_db, first.document.id) == 1

    @pytest.mark.asyncio
    async def test_last_link_deletes_document(
        self, document_service: DocumentService, test_async_db: AsyncSession
    ) -> None:
        # Arrange
        registered = await document_service.register_document(uuid.uuid4(), "n.txt", "text/plain", b"abc")
        document_id = registered.document.id

        # Act
        result = await document_service.delete_document_link(registered.link_id)

        # Assert
        assert result.last_link is True
        assert await document_crud.get_by_id(test_async_db, document_id) is None

    @pytest.mark.asyncio
    async def test_unknown_link(self, document_service: DocumentService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await document_service.delete_document_link(uuid.uuid4())
