"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory database, session factory, seeded lesson and thread,
model client doubles
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ai_mentor.boundary.db.base import Base
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.models import MentorLessonModel, MessageRole, ThreadModel, ThreadStatus
from ai_mentor.configs.mentor import MentorSettings
from ai_mentor.core.thread_locks import ThreadLockRegistry


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(test_session_factory):
    """
    Create in-memory SQLite async database session for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with test_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def user_id() -> uuid.UUID:
    """Thread owner."""
    return uuid.uuid4()


@pytest.fixture
def lesson_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
async def lesson(test_async_db: AsyncSession, lesson_id: uuid.UUID) -> MentorLessonModel:
    """Mentor configuration for a lesson."""
    row = MentorLessonModel(
        lesson_id=lesson_id,
        name="fractions",
        title="Adding Fractions",
        instructions="Guide the student through adding fractions with unlike denominators.",
        completion_conditions="1. Finds a common denominator\n2. Adds the numerators\n3. Simplifies the result",
        target_groups=[{"name": "Grade 5", "characteristic": "Ten to eleven years old"}],
    )
    test_async_db.add(row)
    await test_async_db.commit()
    return row


@pytest.fixture
async def thread(test_async_db: AsyncSession, lesson: MentorLessonModel, user_id: uuid.UUID) -> ThreadModel:
    """ACTIVE thread with a stored SYSTEM prompt."""
    row = ThreadModel(
        lesson_id=lesson.lesson_id,
        user_id=user_id,
        user_language="English",
        status=ThreadStatus.ACTIVE,
    )
    test_async_db.add(row)
    await test_async_db.flush()
    await message_crud.upsert_live(
        test_async_db,
        row.id,
        MessageRole.SYSTEM,
        "You are the mentor for Adding Fractions.",
        9,
    )
    await test_async_db.commit()
    return row


@pytest.fixture
def mentor_settings() -> MentorSettings:
    """Pipeline configuration with the default budget."""
    return MentorSettings(threshold=100, top_k=5, chunk_neighbours=2, similarity_threshold=0.5, max_tokens=1024)


@pytest.fixture
def locks() -> ThreadLockRegistry:
    """Fresh lock registry per test."""
    return ThreadLockRegistry()


@pytest.fixture
def mock_token_counter() -> MagicMock:
    """Token counter that counts words."""
    counter = MagicMock()
    counter.count = MagicMock(side_effect=lambda model, text: len(text.split()) if text else 0)
    return counter


@pytest.fixture
def mock_llm() -> MagicMock:
    """
    Mentor chat backend double.

    Returns:
        MagicMock: model_id plus async chat/generate
    """
    llm = MagicMock()
    llm.model_id = "gemini-test"
    llm.chat = AsyncMock(return_value="Let's find a common denominator first.")
    llm.generate = AsyncMock(return_value="The student is adding fractions.")
    return llm


@pytest.fixture
def mock_retrieval() -> MagicMock:
    """Retrieval service returning no context."""
    retrieval = MagicMock()
    retrieval.get_context = AsyncMock(return_value=[])
    return retrieval
