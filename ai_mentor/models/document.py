"""
Document API schemas.

Pre-chunked ingestion: the file parser and chunker are external, the API
receives the chunk texts together with the uploaded file bytes used for deduplication.

Dependencies: pydantic
System role: Document API contracts
"""

import base64
import binascii
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from ai_mentor.boundary.db.models.document_model import DocumentStatus
from ai_mentor.models.common import CamelModel


class ChunkInput(CamelModel):
    content: str = Field(min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)


class IngestDocumentRequest(CamelModel):
    """Register a document for a lesson and ingest its chunks."""

    file_name: str = Field(min_length=1, max_length=255)
    content_type: str = Field(min_length=1, max_length=127)
    file_base64: str = Field(description="Original file bytes, base64 encoded, used for deduplication")
    chunks: list[ChunkInput] = Field(min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("file_base64")
    @classmethod
    def _valid_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("fileBase64 must be valid base64") from e
        return value

    def file_bytes(self) -> bytes:
        return base64.b64decode(self.file_base64)


class DocumentResponse(CamelModel):
    """Document linked to a lesson."""

    id: UUID
    link_id: UUID | None = None
    file_name: str
    content_type: str
    byte_size: int
    status: DocumentStatus
    error_message: str | None = None
    created_at: datetime


class UnlinkResponse(CamelModel):
    document_id: UUID
    last_link: bool
