"""
Mentor thread API endpoints.

Routes:
- POST /ai/thread - Open a thread for a lesson
- GET /ai/thread/{thread_id} - Read a thread
- GET /ai/threads?lesson_id= - Caller's threads for a lesson
- GET /ai/thread/{thread_id}/messages - Conversation transcript
- POST /ai/thread/{thread_id}/complete - Close a thread without judging

Dependencies: ai_mentor.application.services.thread_service
System role: Thread management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ai_mentor.api.deps import CurrentUser, get_current_user, get_thread_service
from ai_mentor.api.error_handling import handle_mentor_errors
from ai_mentor.application.services import ThreadService
from ai_mentor.models.thread import CreateThreadRequest, MessageResponse, ThreadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["threads"])


@router.post("/thread", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
@handle_mentor_errors
async def create_thread(
    request: CreateThreadRequest,
    user: CurrentUser = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadResponse:
    """
    Open a mentor thread for a lesson.

    The thread starts ACTIVE with the rendered system prompt and, when the
    model answers, a welcome message.

    Raises:
        HTTPException(404): Lesson has no mentor configuration
        HTTPException(500): Thread could not be stored
    """
    thread = await thread_service.create_thread(
        lesson_id=request.lesson_id,
        user_id=user.id,
        user_language=request.user_language,
    )
    return ThreadResponse.model_validate(thread)


@router.get("/thread/{thread_id}", response_model=ThreadResponse)
@handle_mentor_errors
async def get_thread(
    thread_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadResponse:
    thread = await thread_service.get_thread(thread_id, user.id, is_admin=user.is_admin)
    return ThreadResponse.model_validate(thread)


@router.get("/threads", response_model=list[ThreadResponse])
@handle_mentor_errors
async def list_threads(
    lesson_id: UUID = Query(..., description="Lesson the threads belong to"),
    user: CurrentUser = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> list[ThreadResponse]:
    threads = await thread_service.list_threads(lesson_id, user.id)
    return [ThreadResponse.model_validate(thread) for thread in threads]


@router.get("/thread/{thread_id}/messages", response_model=list[MessageResponse])
@handle_mentor_errors
async def get_thread_messages(
    thread_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> list[MessageResponse]:
    """
    Student and mentor messages of a thread, oldest first.

    Summarized (archived) messages are included and flagged.
    """
    messages = await thread_service.get_messages(thread_id, user.id, is_admin=user.is_admin)
    return [MessageResponse.from_model(message) for message in messages]


@router.post("/thread/{thread_id}/complete", response_model=ThreadResponse)
@handle_mentor_errors
async def complete_thread(
    thread_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadResponse:
    thread = await thread_service.complete_thread(thread_id, user.id)
    logger.info("Thread completed", extra={"thread_id": str(thread_id)})
    return ThreadResponse.model_validate(thread)
