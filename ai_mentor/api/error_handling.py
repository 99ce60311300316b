"""
Mentor API error handling.

Maps pipeline exceptions to HTTP status codes in one place. Server-side
failures are logged with full context and answered with a generic message.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from ai_mentor.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    LessonNotFoundError,
    MentorPipelineException,
    ThreadNotFoundError,
    ThreadOwnershipError,
    ThreadStateError,
    ValidationError,
)
from ai_mentor.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])

CLIENT_ERRORS: tuple[tuple[type[MentorPipelineException], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ThreadOwnershipError, status.HTTP_403_FORBIDDEN),
    (ThreadNotFoundError, status.HTTP_404_NOT_FOUND),
    (LessonNotFoundError, status.HTTP_404_NOT_FOUND),
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (ThreadStateError, status.HTTP_409_CONFLICT),
)

SERVER_MESSAGES: dict[type[MentorPipelineException], str] = {
    DocumentProcessingError: "Document could not be processed",
}
GENERIC_SERVER_MESSAGE = "The mentor is temporarily unavailable"


def to_http_exception(error: Exception) -> HTTPException:
    """
    Translate an exception raised below the API into an HTTPException.

    Client errors keep their message; server errors get a generic one.
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, MentorPipelineException):
        for error_type, status_code in CLIENT_ERRORS:
            if isinstance(error, error_type):
                logger.warning(
                    "Mentor request rejected",
                    extra={"status_code": status_code, **error.to_dict()},
                )
                return HTTPException(status_code=status_code, detail=error.message)
        logger.error("Mentor request failed", extra=error.to_dict())
        message = SERVER_MESSAGES.get(type(error), GENERIC_SERVER_MESSAGE)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)

    logger.exception("Unexpected failure in mentor operation", extra={"error": str(error)})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=GENERIC_SERVER_MESSAGE,
    )


def handle_mentor_errors(func: F) -> F:
    """
    Decorator that turns pipeline exceptions into HTTPExceptions.

    Centralizes:
    - Logging of errors with their details
    - Mapping exception types to status codes
    - Hiding backend error text from 500 responses
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as e:
            raise to_http_exception(e) from e

    return wrapper  # type: ignore


STREAM_ERROR_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_409_CONFLICT: "THREAD_NOT_ACTIVE",
}


def to_error_event(error: Exception) -> StreamEvent:
    """Stream error event for failures reported inside an open SSE or WebSocket stream."""
    http_error = to_http_exception(error)
    code = STREAM_ERROR_CODES.get(http_error.status_code, "MENTOR_UNAVAILABLE")
    return StreamEvent(
        event=StreamEventType.ERROR,
        data={"code": code, "status": http_error.status_code, "message": http_error.detail},
    )
