"""
Test suite for ThreadService.

System role: Verification of thread creation, reads and completion
"""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.thread_service import ThreadService
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.models import MentorLessonModel, MessageRole, ThreadModel, ThreadStatus
from ai_mentor.core.exceptions import (
    CompletionError,
    LessonNotFoundError,
    ThreadOwnershipError,
    ThreadStateError,
)
from ai_mentor.core.thread_locks import ThreadLockRegistry


@pytest.fixture
def thread_service(
    test_async_db: AsyncSession,
    mock_llm: MagicMock,
    mock_token_counter: MagicMock,
    locks: ThreadLockRegistry,
) -> ThreadService:
    mock_llm.generate.return_value = "Welcome! Shall we add some fractions?"
    return ThreadService(db=test_async_db, llm=mock_llm, token_counter=mock_token_counter, locks=locks)


class TestCreateThread:
    """Test suite for ThreadService.create_thread()."""

    @pytest.mark.asyncio
    async def test_stores_system_prompt_and_welcome(
        self,
        thread_service: ThreadService,
        test_async_db: AsyncSession,
        lesson: MentorLessonModel,
        user_id: uuid.UUID,
    ) -> None:
        """Test a new thread starts ACTIVE with SYSTEM and a welcome MENTOR message."""
        # Act
        thread = await thread_service.create_thread(lesson.lesson_id, user_id, "German")

        # Assert
        assert thread.status == ThreadStatus.ACTIVE
        assert thread.user_language == "German"
        system = await message_crud.get_live_by_role(test_async_db, thread.id, MessageRole.SYSTEM)
        assert "Adding Fractions" in system.content
        assert "German" in system.content
        assert "Grade 5" in system.content
        assert system.token_count > 0
        history = await message_crud.get_history(test_async_db, thread.id)
        assert [(m.role, m.content) for m in history] == [
            (MessageRole.MENTOR, "Welcome! Shall we add some fractions?")
        ]

    @pytest.mark.asyncio
    async def test_welcome_failure_is_tolerated(
        self,
        thread_service: ThreadService,
        test_async_db: AsyncSession,
        lesson: MentorLessonModel,
        user_id: uuid.UUID,
        mock_llm: MagicMock,
    ) -> None:
        # Arrange
        mock_llm.generate.side_effect = CompletionError("down", operation="generate")

        # Act
        thread = await thread_service.create_thread(lesson.lesson_id, user_id, "English")

        # Assert
        assert await message_crud.get_history(test_async_db, thread.id) == []
        assert await message_crud.get_live_by_role(test_async_db, thread.id, MessageRole.SYSTEM) is not None

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, thread_service: ThreadService, user_id: uuid.UUID) -> None:
        # Act & Assert
        with pytest.raises(LessonNotFoundError):
            await thread_service.create_thread(uuid.uuid4(), user_id, "English")


class TestThreadReads:
    """Test suite for thread and transcript reads."""

    @pytest.mark.asyncio
    async def test_messages_include_archived(
        self,
        thread_service: ThreadService,
        test_async_db: AsyncSession,
        thread: ThreadModel,
        user_id: uuid.UUID,
    ) -> None:
        """Test the transcript keeps archived turns and hides SYSTEM."""
        # Arrange
        user_message, _ = await message_crud.create_turn(
            test_async_db,
            thread_id=thread.id,
            user_content="q",
            user_tokens=1,
            mentor_content="a",
            mentor_tokens=1,
        )
        await message_crud.archive(test_async_db, [user_message.id])
        await test_async_db.commit()

        # Act
        messages = await thread_service.get_messages(thread.id, user_id)

        # Assert
        assert [(m.role, m.archived) for m in messages] == [
            (MessageRole.USER, True),
            (MessageRole.MENTOR, False),
        ]

    @pytest.mark.asyncio
    async def test_admin_reads_foreign_thread(self, thread_service: ThreadService, thread: ThreadModel) -> None:
        # Act
        loaded = await thread_service.get_thread(thread.id, uuid.uuid4(), is_admin=True)

        # Assert
        assert loaded.id == thread.id

    @pytest.mark.asyncio
    async def test_foreign_thread_rejected(self, thread_service: ThreadService, thread: ThreadModel) -> None:
        # Act & Assert
        with pytest.raises(ThreadOwnershipError):
            await thread_service.get_messages(thread.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_threads_for_lesson(
        self, thread_service: ThreadService, thread: ThreadModel, user_id: uuid.UUID
    ) -> None:
        # Act
        threads = await thread_service.list_threads(thread.lesson_id, user_id)

        # Assert
        assert [t.id for t in threads] == [thread.id]


class TestCompleteThread:
    """Test suite for ThreadService.complete_thread()."""

    @pytest.mark.asyncio
    async def test_complete_once(
        self, thread_service: ThreadService, thread: ThreadModel, user_id: uuid.UUID
    ) -> None:
        # Act
        completed = await thread_service.complete_thread(thread.id, user_id)

        # Assert
        assert completed.status == ThreadStatus.COMPLETED
        with pytest.raises(ThreadStateError):
            await thread_service.complete_thread(thread.id, user_id)
