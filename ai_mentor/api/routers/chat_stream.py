"""
WebSocket streaming chat endpoint.

Provides real-time token streaming for mentor replies using WebSocket.

Routes: WS /ws/ai/threads/{thread_id}/chat

Dependencies: ai_mentor.application.services.streaming_service
System role: WebSocket streaming HTTP API
"""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from ai_mentor.api.deps import CurrentUser, build_streaming_service, get_service_cache, get_websocket_user
from ai_mentor.api.error_handling import to_error_event
from ai_mentor.api.routers.chat import stream_events
from ai_mentor.boundary.db import get_async_session_factory
from ai_mentor.models.streaming import ClientChatEvent, ClientEventType, StreamEvent, StreamEventType

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


def _protocol_error(code: str, message: str) -> dict:
    return StreamEvent(event=StreamEventType.ERROR, data={"code": code, "message": message}).to_dict()


async def _handle_chat(websocket: WebSocket, thread_id: UUID, user: CurrentUser, payload: ClientChatEvent) -> None:
    message_id = UUID(payload.id) if payload.id else None
    async with get_async_session_factory()() as db:
        service = build_streaming_service(db, get_service_cache())
        try:
            stream = await service.stream_message(
                thread_id=thread_id,
                user_id=user.id,
                content=payload.content,
                message_id=message_id,
            )
        except Exception as e:
            await websocket.send_json(to_error_event(e).to_dict())
            return

        event_count = 0
        async for event in stream_events(stream):
            event_count += 1
            await websocket.send_json(event.to_dict())
        logger.info(
            "WebSocket turn streamed",
            extra={"thread_id": str(thread_id), "event_count": event_count},
        )


@router.websocket("/ws/ai/threads/{thread_id}/chat")
async def websocket_chat(
    websocket: WebSocket,
    thread_id: UUID,
) -> None:
    """
    WebSocket endpoint for streaming mentor replies.

    Client sends:
        {"event": "chat", "data": {"content": "...", "id": "<optional uuid>"}}
        {"event": "ping"}

    Server sends:
        {"event": "connected", "data": {"threadId": "..."}}
        {"event": "context", "data": {"threadId": "...", "chunks": [...]}}
        {"event": "token", "data": {"token": "...", "index": 0}}
        {"event": "complete", "data": {"userMessage": {...}, "mentorMessage": {...}}}
        {"event": "error", "data": {"code": "...", "message": "..."}}
        {"event": "pong", "data": {}}

    Args:
        websocket: WebSocket connection
        thread_id: Thread UUID from path
    """
    try:
        user = get_websocket_user(
            websocket.headers.get("x-user-id") or websocket.query_params.get("user_id"),
            websocket.headers.get("x-user-role") or websocket.query_params.get("role"),
        )
    except HTTPException:
        logger.warning("WebSocket rejected: missing identity", extra={"thread_id": str(thread_id)})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    logger.info(
        "WebSocket connection established",
        extra={"thread_id": str(thread_id), "client_host": websocket.client},
    )
    await websocket.send_json(
        StreamEvent(event=StreamEventType.CONNECTED, data={"threadId": str(thread_id)}).to_dict()
    )

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                data = json.loads(raw_data)
            except json.JSONDecodeError as e:
                logger.warning(
                    "Failed to parse JSON",
                    extra={"thread_id": str(thread_id), "error_msg": str(e)},
                )
                await websocket.send_json(_protocol_error("INVALID_JSON", "Invalid JSON format"))
                continue

            event_type = data.get("event") if isinstance(data, dict) else None

            if event_type == ClientEventType.PING.value:
                await websocket.send_json(StreamEvent(event=StreamEventType.PONG, data={}).to_dict())
                continue

            if event_type == ClientEventType.CHAT.value:
                try:
                    payload = ClientChatEvent.model_validate(data.get("data") or {})
                    if payload.id:
                        UUID(payload.id)
                except ValueError:
                    await websocket.send_json(_protocol_error("INVALID_PAYLOAD", "Chat payload is invalid"))
                    continue
                await _handle_chat(websocket, thread_id, user, payload)
                continue

            logger.warning(
                "Unknown WebSocket event",
                extra={"thread_id": str(thread_id), "event_type": str(event_type)},
            )
            await websocket.send_json(_protocol_error("UNKNOWN_EVENT", f"Unknown event type: {event_type}"))

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected", extra={"thread_id": str(thread_id)})
