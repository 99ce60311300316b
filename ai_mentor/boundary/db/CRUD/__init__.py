"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from ai_mentor.boundary.db.CRUD import thread_crud, message_crud

    thread = await thread_crud.get_by_id(db, thread_id)
"""

from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD
from ai_mentor.boundary.db.CRUD.lesson_crud import LessonCRUD, lesson_crud
from ai_mentor.boundary.db.CRUD.thread_crud import ThreadCRUD, thread_crud
from ai_mentor.boundary.db.CRUD.message_crud import MessageCRUD, message_crud
from ai_mentor.boundary.db.CRUD.document_crud import (
    DocumentCRUD,
    LessonDocumentCRUD,
    document_crud,
    lesson_document_crud,
)
from ai_mentor.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud

__all__ = [
    "BaseCRUD",
    "LessonCRUD",
    "lesson_crud",
    "ThreadCRUD",
    "thread_crud",
    "MessageCRUD",
    "message_crud",
    "DocumentCRUD",
    "document_crud",
    "LessonDocumentCRUD",
    "lesson_document_crud",
    "ChunkCRUD",
    "chunk_crud",
]
