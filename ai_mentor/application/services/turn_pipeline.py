"""
Shared steps of a mentor turn.

Both the single-shot and the streaming path run the same preparation
(guard, summarize, build prompt) and the same finalize step (count tokens,
persist the USER and MENTOR pair in one commit).

Dependencies: ai_mentor.application.services, ai_mentor.boundary.db
System role: Turn preparation and finalize
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.prompt_builder import PromptBuilder
from ai_mentor.application.services.summarization_service import SummarizationService
from ai_mentor.application.services.thread_guard import load_active_thread
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.models.thread_model import MessageModel, ThreadModel
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry, RETRIEVAL_SOURCE
from ai_mentor.core.exceptions import PersistenceError
from ai_mentor.core.token_counter import TokenCounter

logger = logging.getLogger(__name__)


@dataclass
class PreparedTurn:
    """Guarded thread and the prompt for its next turn."""

    thread: ThreadModel
    entries: list[PromptEntry]
    context: list[PromptEntry] = field(default_factory=list)


@dataclass
class TurnResult:
    """Persisted question and reply of one turn."""

    user_message: MessageModel
    mentor_message: MessageModel


async def prepare_turn(
    db: AsyncSession,
    summarizer: SummarizationService,
    prompt_builder: PromptBuilder,
    thread_id: UUID,
    user_id: UUID,
    content: str,
    temp_message_id: UUID,
) -> PreparedTurn:
    """
    Guard the thread, compact its history if needed and build the prompt.

    Raises:
        ThreadNotFoundError, ThreadOwnershipError, ThreadStateError: Guard failures
        PersistenceError: Summary could not be stored
    """
    thread = await load_active_thread(db, thread_id, user_id)
    await summarizer.summarize_if_needed(thread)
    entries = await prompt_builder.build_prompt(thread, content, str(temp_message_id))
    context = [entry for entry in entries if entry.source == RETRIEVAL_SOURCE]
    return PreparedTurn(thread=thread, entries=entries, context=context)


async def persist_turn(
    db: AsyncSession,
    token_counter: TokenCounter,
    model_id: str,
    thread_id: UUID,
    user_content: str,
    mentor_content: str,
    user_message_id: UUID,
) -> TurnResult:
    """
    Count tokens for both sides of a turn and store them in one commit.

    Raises:
        PersistenceError: On any store failure (rolled back)
    """
    user_tokens = token_counter.count(model_id, user_content)
    mentor_tokens = token_counter.count(model_id, mentor_content)
    try:
        user_message, mentor_message = await message_crud.create_turn(
            db,
            thread_id=thread_id,
            user_content=user_content,
            user_tokens=user_tokens,
            mentor_content=mentor_content,
            mentor_tokens=mentor_tokens,
            user_message_id=user_message_id,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"{__name__}:persist_turn - Persist FAILED: rolled back",
            extra={"thread_id": str(thread_id), "error": str(e)},
        )
        raise PersistenceError(
            "Failed to store turn",
            operation="persist_turn",
            details={"thread_id": str(thread_id)},
        ) from e

    logger.info(
        f"{__name__}:persist_turn - Stored turn",
        extra={"thread_id": str(thread_id), "user_tokens": user_tokens, "mentor_tokens": mentor_tokens},
    )
    return TurnResult(user_message=user_message, mentor_message=mentor_message)
