"""
Chat service for single-shot mentor turns.

Orchestrates guard, summarization, prompt assembly, completion and
persistence of one turn while holding the thread's lock.

Dependencies: ai_mentor.core.agentic_system.mentor, ai_mentor.application.services
System role: Completion Service (single-shot)
"""

import logging
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.prompt_builder import PromptBuilder
from ai_mentor.application.services.summarization_service import SummarizationService
from ai_mentor.application.services.thread_guard import validate_content
from ai_mentor.application.services.turn_pipeline import TurnResult, persist_turn, prepare_turn
from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM
from ai_mentor.core.thread_locks import ThreadLockRegistry, thread_locks
from ai_mentor.core.token_counter import TokenCounter

logger = logging.getLogger(__name__)


class ChatService:
    """
    Single-shot mentor turns.

    Nothing is persisted unless the completion succeeds.
    """

    def __init__(
        self,
        db: AsyncSession,
        llm: MentorLLM,
        summarizer: SummarizationService,
        prompt_builder: PromptBuilder,
        token_counter: TokenCounter,
        locks: ThreadLockRegistry = thread_locks,
    ) -> None:
        self.db = db
        self.llm = llm
        self.summarizer = summarizer
        self.prompt_builder = prompt_builder
        self.token_counter = token_counter
        self.locks = locks

    async def generate_message(
        self,
        thread_id: UUID,
        user_id: UUID,
        content: str,
        message_id: UUID | None = None,
    ) -> TurnResult:
        """
        Run one mentor turn.

        Flow:
        1. Validate content
        2. Guard thread (exists, owned, ACTIVE)
        3. Summarize if over budget
        4. Build prompt
        5. Complete
        6. Persist USER and MENTOR messages

        Args:
            thread_id: Thread UUID
            user_id: Caller, must own the thread
            content: Student message
            message_id: Optional client id for the USER message

        Returns:
            TurnResult with both persisted messages

        Raises:
            ValidationError: Blank content
            ThreadNotFoundError, ThreadOwnershipError, ThreadStateError: Guard failures
            CompletionError: Backend failure
            PersistenceError: Store failure
        """
        validate_content(content)
        temp_id = message_id or uuid4()
        logger.info(f"{__name__}:generate_message - START thread_id={thread_id}")

        async with self.locks.hold(thread_id):
            turn = await prepare_turn(
                self.db,
                self.summarizer,
                self.prompt_builder,
                thread_id,
                user_id,
                content,
                temp_id,
            )
            reply = await self.llm.chat(turn.entries)
            result = await persist_turn(
                self.db,
                self.token_counter,
                self.llm.model_id,
                turn.thread.id,
                content,
                reply,
                temp_id,
            )

        logger.info(f"{__name__}:generate_message - DONE thread_id={thread_id}")
        return result
