"""
Chat API endpoints.

Routes:
- POST /ai/chat - Run a mentor turn and return the persisted pair
- POST /ai/chat/stream - Stream a mentor turn using Server-Sent Events (SSE)

Dependencies: ai_mentor.application.services.chat_service, ai_mentor.application.services.streaming_service
System role: Chat messaging HTTP API with streaming support
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ai_mentor.api.deps import CurrentUser, get_chat_service, get_current_user, get_streaming_service
from ai_mentor.api.error_handling import handle_mentor_errors, to_error_event
from ai_mentor.application.services import ChatService, MentorStream, StreamingService
from ai_mentor.models.chat import ChatRequest, ChatResponse
from ai_mentor.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post("/chat", response_model=ChatResponse)
@handle_mentor_errors
async def chat(
    request: ChatRequest,
    user: CurrentUser = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Send a student message and wait for the mentor reply.

    Raises:
        HTTPException(400): Empty content
        HTTPException(403): Thread owned by another user
        HTTPException(404): Thread not found
        HTTPException(409): Thread not active
        HTTPException(500): Completion or persistence failure
    """
    result = await chat_service.generate_message(
        thread_id=request.thread_id,
        user_id=user.id,
        content=request.content,
        message_id=request.id,
    )
    return ChatResponse.from_result(result)


async def stream_events(stream: MentorStream) -> AsyncGenerator[StreamEvent, None]:
    """
    Translate a MentorStream into protocol events.

    Yields context, then one token event per chunk, then complete with the
    persisted pair or a single error event.
    """
    yield StreamEvent(
        event=StreamEventType.CONTEXT,
        data={"threadId": str(stream.thread_id), "chunks": [entry.content for entry in stream.context]},
    )
    index = 0
    try:
        async for token in stream.tokens():
            yield StreamEvent(event=StreamEventType.TOKEN, data={"token": token, "index": index})
            index += 1
        result = await stream.completion
    except Exception as e:
        yield to_error_event(e)
        return
    yield StreamEvent(
        event=StreamEventType.COMPLETE,
        data=ChatResponse.from_result(result).model_dump(by_alias=True, mode="json"),
    )


@router.post("/chat/stream")
@handle_mentor_errors
async def chat_stream(
    request: ChatRequest,
    user: CurrentUser = Depends(get_current_user),
    streaming_service: StreamingService = Depends(get_streaming_service),
) -> StreamingResponse:
    """
    Stream a mentor reply using Server-Sent Events.

    Guard and validation failures are answered with a status code before the
    stream opens. Once open, failures arrive as an error event. A client that
    disconnects does not stop the turn from being stored.

    Event types:
    - context: Retrieved lesson material used for the reply
    - token: Individual reply chunks
    - complete: Persisted user and mentor messages
    - error: Failure after the stream opened
    """
    stream = await streaming_service.stream_message(
        thread_id=request.thread_id,
        user_id=user.id,
        content=request.content,
        message_id=request.id,
    )
    logger.info("SSE stream opened", extra={"thread_id": str(request.thread_id)})

    async def event_generator() -> AsyncGenerator[str, None]:
        async for event in stream_events(stream):
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
