"""
Summarization service.

Keeps a thread's live history under the token budget by folding it into a
single running SUMMARY message. Archiving and the summary upsert commit
together; a completion failure leaves the thread untouched.

Dependencies: ai_mentor.core.agentic_system.mentor, ai_mentor.boundary.db
System role: Summarization Service
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.models.thread_model import MessageModel, MessageRole, ThreadModel
from ai_mentor.configs.mentor import MentorSettings
from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM
from ai_mentor.core.agentic_system.mentor.mentor_prompt import render_summary_prompt
from ai_mentor.core.exceptions import CompletionError, PersistenceError
from ai_mentor.core.token_counter import TokenCounter
from ai_mentor.observability.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)


class SummarizationService:
    """Threshold-triggered history compaction for a thread."""

    def __init__(
        self,
        db: AsyncSession,
        llm: MentorLLM,
        token_counter: TokenCounter,
        settings: MentorSettings,
        prompt_registry: PromptRegistry | None = None,
    ) -> None:
        self.db = db
        self.llm = llm
        self.token_counter = token_counter
        self.settings = settings
        self.prompt_registry = prompt_registry

    async def summarize_if_needed(self, thread: ThreadModel) -> bool:
        """
        Summarize when live USER/MENTOR tokens exceed the threshold.

        Returns:
            True if a summary was written
        """
        token_sum = await message_crud.get_token_sum(self.db, thread.id)
        if token_sum <= self.settings.threshold:
            return False
        logger.info(
            f"{__name__}:summarize_if_needed - Threshold exceeded",
            extra={"thread_id": str(thread.id), "tokens": token_sum, "threshold": self.settings.threshold},
        )
        return await self.summarize(thread) is not None

    async def summarize(self, thread: ThreadModel) -> MessageModel | None:
        """
        Fold live history into the thread's SUMMARY message.

        Returns:
            The upserted SUMMARY message, or None if there was nothing to
            summarize or the completion backend failed

        Raises:
            PersistenceError: If archiving or the upsert fails (rolled back)
        """
        thread_id = thread.id
        history = await message_crud.get_history(self.db, thread_id, archived=False)
        if not history:
            return None
        previous = await message_crud.get_live_by_role(self.db, thread_id, MessageRole.SUMMARY)

        # Step 1: render transcript
        lines = [f"summary: {previous.content}"] if previous is not None else []
        lines.extend(f"{message.role.value}: {message.content}" for message in history)
        prompt = render_summary_prompt("\n".join(lines), thread.user_language, self.prompt_registry)

        # Step 2: generate summary
        try:
            logger.info(f"{__name__}:summarize - Step 2: Generating summary of {len(history)} messages")
            summary = await self.llm.generate(prompt)
        except CompletionError as e:
            logger.warning(
                f"{__name__}:summarize - Step 2 FAILED: summary skipped, history kept",
                extra={"thread_id": str(thread_id), "error": str(e)},
            )
            return None
        token_count = self.token_counter.count(self.llm.model_id, summary)

        # Step 3: archive and upsert atomically
        try:
            await message_crud.archive(self.db, [message.id for message in history])
            row = await message_crud.upsert_live(
                self.db,
                thread_id,
                MessageRole.SUMMARY,
                summary,
                token_count,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:summarize - Step 3 FAILED: rolled back",
                extra={"thread_id": str(thread_id), "error": str(e)},
            )
            raise PersistenceError(
                "Failed to store thread summary",
                operation="summarize",
                details={"thread_id": str(thread_id)},
            ) from e

        logger.info(
            f"{__name__}:summarize - Step 3 OK: archived {len(history)} messages",
            extra={"thread_id": str(thread_id), "summary_tokens": token_count},
        )
        return row
