"""
Thread service.

Creates mentor threads with their rendered system prompt and opening
message, and serves thread and message reads.

Dependencies: ai_mentor.core.agentic_system.mentor, ai_mentor.boundary.db
System role: Thread lifecycle orchestration
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.thread_guard import ensure_active, load_thread
from ai_mentor.boundary.db.CRUD.lesson_crud import lesson_crud
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.CRUD.thread_crud import thread_crud
from ai_mentor.boundary.db.models.thread_model import (
    MessageModel,
    MessageRole,
    ThreadModel,
    ThreadStatus,
)
from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM
from ai_mentor.core.agentic_system.mentor.mentor_prompt import (
    render_system_prompt,
    render_welcome_prompt,
)
from ai_mentor.core.exceptions import CompletionError, LessonNotFoundError, PersistenceError
from ai_mentor.core.thread_locks import ThreadLockRegistry, thread_locks
from ai_mentor.core.token_counter import TokenCounter
from ai_mentor.observability.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)


class ThreadService:
    """Thread creation, reads and explicit completion."""

    def __init__(
        self,
        db: AsyncSession,
        llm: MentorLLM,
        token_counter: TokenCounter,
        locks: ThreadLockRegistry = thread_locks,
        prompt_registry: PromptRegistry | None = None,
    ) -> None:
        self.db = db
        self.llm = llm
        self.token_counter = token_counter
        self.locks = locks
        self.prompt_registry = prompt_registry

    async def create_thread(
        self,
        lesson_id: UUID,
        user_id: UUID,
        user_language: str,
    ) -> ThreadModel:
        """
        Open a mentor thread for a lesson.

        Flow:
        1. Look up lesson context
        2. Create ACTIVE thread and store the rendered SYSTEM prompt
        3. Store a generated welcome MENTOR message (best-effort)

        Raises:
            LessonNotFoundError: Lesson has no mentor configuration
            PersistenceError: Thread could not be stored
        """
        lesson = await lesson_crud.get_by_lesson_id(self.db, lesson_id)
        if lesson is None:
            raise LessonNotFoundError(str(lesson_id))

        system_prompt = render_system_prompt(
            lesson_title=lesson.title,
            instructions=lesson.instructions,
            target_groups=lesson.target_groups or [],
            language=user_language,
            registry=self.prompt_registry,
        )

        try:
            thread = await thread_crud.create(
                self.db,
                lesson_id=lesson_id,
                user_id=user_id,
                user_language=user_language,
                status=ThreadStatus.ACTIVE,
            )
            await message_crud.upsert_live(
                self.db,
                thread.id,
                MessageRole.SYSTEM,
                system_prompt,
                self.token_counter.count(self.llm.model_id, system_prompt),
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to create thread", operation="create_thread") from e

        logger.info(
            f"{__name__}:create_thread - Created thread",
            extra={"thread_id": str(thread.id), "lesson_id": str(lesson_id)},
        )
        await self._send_welcome(thread, system_prompt)
        return thread

    async def _send_welcome(self, thread: ThreadModel, system_prompt: str) -> None:
        thread_id = thread.id
        try:
            welcome = await self.llm.generate(render_welcome_prompt(system_prompt, self.prompt_registry))
        except CompletionError as e:
            logger.warning(
                f"{__name__}:_send_welcome - Welcome message skipped",
                extra={"thread_id": str(thread_id), "error": str(e)},
            )
            return

        try:
            await message_crud.create(
                self.db,
                thread_id=thread_id,
                role=MessageRole.MENTOR,
                content=welcome,
                token_count=self.token_counter.count(self.llm.model_id, welcome),
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "Failed to store welcome message",
                operation="create_thread",
                details={"thread_id": str(thread_id)},
            ) from e

    async def get_thread(self, thread_id: UUID, user_id: UUID, is_admin: bool = False) -> ThreadModel:
        """Read a thread; owners and admins only."""
        return await load_thread(self.db, thread_id, user_id, allow_admin=is_admin)

    async def list_threads(self, lesson_id: UUID, user_id: UUID) -> Sequence[ThreadModel]:
        """Caller's threads for a lesson."""
        return await thread_crud.get_by_lesson_and_user(self.db, lesson_id, user_id)

    async def get_messages(
        self,
        thread_id: UUID,
        user_id: UUID,
        is_admin: bool = False,
    ) -> Sequence[MessageModel]:
        """
        Full USER/MENTOR transcript of a thread, archived messages included.

        Raises:
            ThreadNotFoundError, ThreadOwnershipError: Access failures
        """
        thread = await load_thread(self.db, thread_id, user_id, allow_admin=is_admin)
        return await message_crud.get_history(self.db, thread.id, archived=None)

    async def complete_thread(self, thread_id: UUID, user_id: UUID) -> ThreadModel:
        """
        Explicitly close an ACTIVE thread without judging it.

        Raises:
            ThreadStateError: Thread already completed
        """
        async with self.locks.hold(thread_id):
            thread = await load_thread(self.db, thread_id, user_id)
            ensure_active(thread)
            try:
                updated = await thread_crud.update_status(self.db, thread.id, ThreadStatus.COMPLETED)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise PersistenceError(
                    "Failed to complete thread",
                    operation="complete_thread",
                    details={"thread_id": str(thread_id)},
                ) from e
        return updated or thread
