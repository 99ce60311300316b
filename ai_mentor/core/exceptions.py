"""
Exception hierarchy for the AI mentor pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class MentorPipelineException(Exception):
    """Base exception for all mentor pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured log records."""
        return {
            "error_type": type(self).__name__,
            "error_message": self.message,
            "error_details": self.details,
        }


class ValidationError(MentorPipelineException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ThreadNotFoundError(MentorPipelineException):
    """Raised when a thread cannot be found."""

    def __init__(self, thread_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["thread_id"] = thread_id
        super().__init__(f"Thread not found: {thread_id}", details)


class ThreadOwnershipError(MentorPipelineException):
    """Raised when a user acts on a thread that belongs to someone else."""

    def __init__(
        self,
        thread_id: str,
        user_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["thread_id"] = thread_id
        details["user_id"] = user_id
        super().__init__("Thread does not belong to user", details)


class ThreadStateError(MentorPipelineException):
    """Raised when an operation requires an ACTIVE thread."""

    def __init__(
        self,
        thread_id: str,
        status: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["thread_id"] = thread_id
        details["status"] = status
        super().__init__("Thread must be active", details)


class LessonNotFoundError(MentorPipelineException):
    """Raised when no mentor lesson exists for a lesson id."""

    def __init__(self, lesson_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["lesson_id"] = lesson_id
        super().__init__(f"Lesson not found: {lesson_id}", details)


class DocumentNotFoundError(MentorPipelineException):
    """Raised when a document or lesson link cannot be found."""

    def __init__(self, resource_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["resource_id"] = resource_id
        super().__init__(f"Document not found: {resource_id}", details)


class DocumentProcessingError(MentorPipelineException):
    """Raised when chunk ingestion for a document fails."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class UpstreamError(MentorPipelineException):
    """Base for failures of the embedding or completion backend."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize upstream error.

        Args:
            message: Error message
            operation: Backend call that failed (chat, generate, stream, embed)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class EmbeddingError(UpstreamError):
    """Raised when embedding generation fails or returns a wrong dimension."""

    pass


class CompletionError(UpstreamError):
    """Raised when the completion backend fails, times out or returns nothing."""

    pass


class PersistenceError(MentorPipelineException):
    """Raised when an atomic store update fails and was rolled back."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
