"""
Streaming event schemas for SSE and WebSocket chat.

Defines event types and payloads for real-time mentor streaming.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


class StreamEventType(str, Enum):
    """Server-to-client event types for streaming chat."""

    CONNECTED = "connected"
    CONTEXT = "context"
    TOKEN = "token"
    COMPLETE = "complete"
    ERROR = "error"
    PONG = "pong"


class ClientEventType(str, Enum):
    """Client-to-server event types."""

    CHAT = "chat"
    PING = "ping"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}

    def to_sse(self) -> str:
        """Render as a Server-Sent Events frame."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data, default=str)}\n\n"


class ClientChatEvent(BaseModel):
    """
    Client chat message event payload.

    Attributes:
        content: Student message
        id: Optional client id for the USER message
    """

    content: str
    id: str | None = None
