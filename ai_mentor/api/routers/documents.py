"""
Lesson document API endpoints.

Routes:
- GET /ai/lessons/{lesson_id}/documents - READY documents of a lesson
- POST /ai/lessons/{lesson_id}/documents - Register and ingest a pre-chunked document
- DELETE /ai/documents/links/{link_id} - Remove a lesson link

Dependencies: ai_mentor.application.services.document_service
System role: Document management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ai_mentor.api.deps import CurrentUser, get_current_user, get_document_service, require_content_manager
from ai_mentor.api.error_handling import handle_mentor_errors
from ai_mentor.application.services import DocumentService
from ai_mentor.boundary.db.models.document_model import DocumentStatus
from ai_mentor.models.document import DocumentResponse, IngestDocumentRequest, UnlinkResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["documents"])


def _to_response(document, link_id: UUID) -> DocumentResponse:
    response = DocumentResponse.model_validate(document)
    response.link_id = link_id
    return response


@router.get("/lessons/{lesson_id}/documents", response_model=list[DocumentResponse])
@handle_mentor_errors
async def list_lesson_documents(
    lesson_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> list[DocumentResponse]:
    require_content_manager(user)
    documents = await document_service.list_lesson_documents(lesson_id)
    return [_to_response(document, link_id) for document, link_id in documents]


@router.post(
    "/lessons/{lesson_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
@handle_mentor_errors
async def ingest_lesson_document(
    lesson_id: UUID,
    request: IngestDocumentRequest,
    user: CurrentUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Register a document for a lesson and embed its chunks.

    An identical file already READY is linked without re-embedding.

    Raises:
        HTTPException(403): Caller may not manage documents
        HTTPException(500): Embedding or storage failed
    """
    require_content_manager(user)
    registered = await document_service.register_document(
        lesson_id=lesson_id,
        file_name=request.file_name,
        content_type=request.content_type,
        content=request.file_bytes(),
        metadata=request.metadata,
    )
    document = registered.document
    if document.status != DocumentStatus.READY:
        document = await document_service.ingest_chunks(
            document.id,
            [chunk.content for chunk in request.chunks],
            [chunk.metadata for chunk in request.chunks],
        )
    logger.info(
        "Lesson document ingested",
        extra={
            "lesson_id": str(lesson_id),
            "document_id": str(document.id),
            "document_created": registered.created,
        },
    )
    return _to_response(document, registered.link_id)


@router.delete("/documents/links/{link_id}", response_model=UnlinkResponse)
@handle_mentor_errors
async def delete_document_link(
    link_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> UnlinkResponse:
    """Remove a lesson link; the document goes with its last link."""
    require_content_manager(user)
    result = await document_service.delete_document_link(link_id)
    return UnlinkResponse(document_id=result.document_id, last_link=result.last_link)
