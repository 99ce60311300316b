"""
Judge service.

Scores a thread's student turns against the lesson's completion
conditions and closes the thread.

Dependencies: ai_mentor.core.agentic_system.judge, ai_mentor.boundary.db
System role: Judge Service
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.thread_guard import load_active_thread
from ai_mentor.boundary.db.CRUD.lesson_crud import lesson_crud
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.CRUD.thread_crud import thread_crud
from ai_mentor.boundary.db.models.thread_model import MessageRole, ThreadStatus
from ai_mentor.core.agentic_system.judge.judge_prompt import render_judge_prompt
from ai_mentor.core.agentic_system.judge.judge_schema import JudgeVerdict
from ai_mentor.core.agentic_system.judge.task_judge import TaskJudge
from ai_mentor.core.exceptions import LessonNotFoundError, PersistenceError, ValidationError
from ai_mentor.core.thread_locks import ThreadLockRegistry, thread_locks
from ai_mentor.observability.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)


@dataclass
class JudgeOutcome:
    """Verdict and the thread status after judging."""

    thread_id: UUID
    verdict: JudgeVerdict
    status: ThreadStatus


class JudgeService:
    """Evaluates and completes mentor threads."""

    def __init__(
        self,
        db: AsyncSession,
        judge: TaskJudge,
        locks: ThreadLockRegistry = thread_locks,
        prompt_registry: PromptRegistry | None = None,
    ) -> None:
        self.db = db
        self.judge = judge
        self.locks = locks
        self.prompt_registry = prompt_registry

    async def run_judge(self, thread_id: UUID, user_id: UUID) -> JudgeOutcome:
        """
        Judge a thread and mark it COMPLETED.

        Every USER message counts, archived ones included.

        Args:
            thread_id: Thread UUID
            user_id: Caller, must own the thread

        Returns:
            JudgeOutcome with the verdict and COMPLETED status

        Raises:
            ThreadNotFoundError, ThreadOwnershipError, ThreadStateError: Guard failures
            LessonNotFoundError: Lesson context missing
            ValidationError: The student has not written anything yet
            CompletionError: Judge backend failed; the thread stays ACTIVE
            PersistenceError: Status update failed
        """
        logger.info(f"{__name__}:run_judge - START thread_id={thread_id}")
        async with self.locks.hold(thread_id):
            thread = await load_active_thread(self.db, thread_id, user_id)
            lesson = await lesson_crud.get_by_lesson_id(self.db, thread.lesson_id)
            if lesson is None:
                raise LessonNotFoundError(str(thread.lesson_id))

            messages = await message_crud.get_history(
                self.db,
                thread.id,
                archived=None,
                roles=(MessageRole.USER,),
            )
            submission = "\n".join(message.content for message in messages)
            if not submission.strip():
                raise ValidationError("Thread has no student messages to judge", field="thread_id")

            system_prompt = render_judge_prompt(
                lesson_title=lesson.title,
                instructions=lesson.instructions,
                conditions=lesson.completion_conditions,
                language=thread.user_language,
                registry=self.prompt_registry,
            )
            verdict = await self.judge.evaluate(system_prompt, submission)

            try:
                await thread_crud.update_status(self.db, thread.id, ThreadStatus.COMPLETED)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise PersistenceError(
                    "Failed to complete thread",
                    operation="judge",
                    details={"thread_id": str(thread_id)},
                ) from e

        logger.info(
            f"{__name__}:run_judge - DONE thread_id={thread_id}",
            extra={"score": verdict.score, "passed": verdict.passed},
        )
        return JudgeOutcome(thread_id=thread_id, verdict=verdict, status=ThreadStatus.COMPLETED)
