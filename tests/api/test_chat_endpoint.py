"""
Test suite for chat API endpoints.

Tests POST /ai/chat and the SSE stream at POST /ai/chat/stream with
FastAPI TestClient and mocked chat and streaming services.

System role: Verification of chat HTTP API endpoints
"""

import json
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ai_mentor.api.deps import get_chat_service, get_streaming_service
from ai_mentor.api.routers.chat import router
from ai_mentor.boundary.db.models import MessageRole
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry
from ai_mentor.core.exceptions import (
    CompletionError,
    ThreadNotFoundError,
    ThreadOwnershipError,
    ThreadStateError,
    ValidationError,
)


class FakeStream:
    """Stand-in for MentorStream with scripted tokens and outcome."""

    def __init__(self, thread_id, tokens, result=None, error=None, context=None):
        self.thread_id = thread_id
        self.context = context or []
        self._tokens = tokens
        self._result = result
        self._error = error

    async def tokens(self):
        for token in self._tokens:
            yield token
        if self._error is not None:
            raise self._error

    async def _complete(self):
        if self._error is not None:
            raise self._error
        return self._result

    @property
    def completion(self):
        return self._complete()


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """Split an SSE body into (event, data) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in frame.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


@pytest.fixture
def mock_chat_service() -> MagicMock:
    service = MagicMock()
    service.generate_message = AsyncMock()
    return service


@pytest.fixture
def mock_streaming_service() -> MagicMock:
    service = MagicMock()
    service.stream_message = AsyncMock()
    return service


@pytest.fixture
def client(mock_chat_service: MagicMock, mock_streaming_service: MagicMock) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_chat_service] = lambda: mock_chat_service
    app.dependency_overrides[get_streaming_service] = lambda: mock_streaming_service
    return TestClient(app)


@pytest.fixture
def turn_result(sample_thread_id: uuid.UUID, message_row) -> SimpleNamespace:
    return SimpleNamespace(
        user_message=message_row(sample_thread_id, MessageRole.USER, "What is 1/2 + 1/4?"),
        mentor_message=message_row(sample_thread_id, MessageRole.MENTOR, "How many quarters is 1/2?"),
    )


class TestChat:
    """Test suite for POST /ai/chat."""

    def test_returns_persisted_pair(
        self,
        client: TestClient,
        mock_chat_service: MagicMock,
        headers: dict,
        caller_id: uuid.UUID,
        sample_thread_id: uuid.UUID,
        turn_result: SimpleNamespace,
    ) -> None:
        # Arrange
        mock_chat_service.generate_message.return_value = turn_result
        client_id = uuid.uuid4()

        # Act
        response = client.post(
            "/ai/chat",
            json={"threadId": str(sample_thread_id), "content": "What is 1/2 + 1/4?", "id": str(client_id)},
            headers=headers,
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["userMessage"]["role"] == "user"
        assert body["mentorMessage"]["content"] == "How many quarters is 1/2?"
        assert body["mentorMessage"]["threadId"] == str(sample_thread_id)
        mock_chat_service.generate_message.assert_awaited_once_with(
            thread_id=sample_thread_id,
            user_id=caller_id,
            content="What is 1/2 + 1/4?",
            message_id=client_id,
        )

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (ValidationError("Message content must not be empty", field="content"), 400),
            (ThreadOwnershipError("t", "u"), 403),
            (ThreadNotFoundError("t"), 404),
            (ThreadStateError("t", "completed"), 409),
            (CompletionError("quota exceeded", operation="chat"), 500),
            (RuntimeError("boom"), 500),
        ],
    )
    def test_error_mapping(
        self,
        client: TestClient,
        mock_chat_service: MagicMock,
        headers: dict,
        sample_thread_id: uuid.UUID,
        error: Exception,
        status_code: int,
    ) -> None:
        """Test pipeline exceptions map to their status codes."""
        # Arrange
        mock_chat_service.generate_message.side_effect = error

        # Act
        response = client.post(
            "/ai/chat",
            json={"threadId": str(sample_thread_id), "content": "x"},
            headers=headers,
        )

        # Assert
        assert response.status_code == status_code
        if status_code == 500:
            assert response.json()["detail"] == "The mentor is temporarily unavailable"

    def test_missing_identity(self, client: TestClient, sample_thread_id: uuid.UUID) -> None:
        response = client.post("/ai/chat", json={"threadId": str(sample_thread_id), "content": "x"})
        assert response.status_code == 401


class TestChatStream:
    """Test suite for POST /ai/chat/stream."""

    def test_event_sequence(
        self,
        client: TestClient,
        mock_streaming_service: MagicMock,
        headers: dict,
        sample_thread_id: uuid.UUID,
        turn_result: SimpleNamespace,
    ) -> None:
        """Test context, tokens and complete arrive in order."""
        # Arrange
        context = [PromptEntry(role=MessageRole.SYSTEM, content="<retrieved_context/>", source="retrieval")]
        mock_streaming_service.stream_message.return_value = FakeStream(
            sample_thread_id, ["How many ", "quarters?"], result=turn_result, context=context
        )

        # Act
        response = client.post(
            "/ai/chat/stream",
            json={"threadId": str(sample_thread_id), "content": "What is 1/2 + 1/4?"},
            headers=headers,
        )

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        events = parse_sse(response.text)
        assert [name for name, _ in events] == ["context", "token", "token", "complete"]
        assert events[0][1] == {"threadId": str(sample_thread_id), "chunks": ["<retrieved_context/>"]}
        assert events[1][1] == {"token": "How many ", "index": 0}
        assert events[2][1] == {"token": "quarters?", "index": 1}
        assert events[3][1]["mentorMessage"]["content"] == "How many quarters is 1/2?"

    def test_failure_after_open_is_error_event(
        self,
        client: TestClient,
        mock_streaming_service: MagicMock,
        headers: dict,
        sample_thread_id: uuid.UUID,
    ) -> None:
        # Arrange
        mock_streaming_service.stream_message.return_value = FakeStream(
            sample_thread_id, ["partial"], error=CompletionError("stream cut", operation="stream")
        )

        # Act
        response = client.post(
            "/ai/chat/stream",
            json={"threadId": str(sample_thread_id), "content": "hi"},
            headers=headers,
        )

        # Assert
        events = parse_sse(response.text)
        assert [name for name, _ in events] == ["context", "token", "error"]
        assert events[-1][1] == {
            "code": "MENTOR_UNAVAILABLE",
            "status": 500,
            "message": "The mentor is temporarily unavailable",
        }

    def test_guard_failure_before_open(
        self,
        client: TestClient,
        mock_streaming_service: MagicMock,
        headers: dict,
        sample_thread_id: uuid.UUID,
    ) -> None:
        """Test errors raised before the stream opens use a status code."""
        # Arrange
        mock_streaming_service.stream_message.side_effect = ThreadStateError("t", "completed")

        # Act
        response = client.post(
            "/ai/chat/stream",
            json={"threadId": str(sample_thread_id), "content": "hi"},
            headers=headers,
        )

        # Assert
        assert response.status_code == 409
