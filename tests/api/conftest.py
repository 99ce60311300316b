"""
Shared fixtures for API tests.

Provides: caller headers and stored-row doubles shaped like ORM rows
System role: API test infrastructure
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from ai_mentor.boundary.db.models import MessageRole, ThreadStatus

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def make_thread(thread_id: uuid.UUID, user_id: uuid.UUID, status: ThreadStatus = ThreadStatus.ACTIVE):
    return SimpleNamespace(
        id=thread_id,
        lesson_id=uuid.UUID("11111111-1111-1111-1111-111111111111"),
        user_id=user_id,
        user_language="English",
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


def make_message(thread_id: uuid.UUID, role: MessageRole, content: str, archived: bool = False):
    return SimpleNamespace(
        id=uuid.uuid4(),
        thread_id=thread_id,
        role=role,
        content=content,
        token_count=len(content.split()),
        archived=archived,
        created_at=NOW,
    )


@pytest.fixture
def caller_id() -> uuid.UUID:
    return uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def headers(caller_id: uuid.UUID) -> dict[str, str]:
    """Gateway identity headers for a student."""
    return {"X-User-Id": str(caller_id), "X-User-Role": "student"}


@pytest.fixture
def sample_thread_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def thread_row():
    """Factory for thread rows."""
    return make_thread


@pytest.fixture
def message_row():
    """Factory for message rows."""
    return make_message
