"""
Streaming service for mentor turns.

Prepares a turn on the request session, then hands the model stream to a
background task. The task pushes tokens to the caller and, once the model
finishes, persists the turn on its own session and resolves the stream's
completion future. A caller that stops reading does not stop the finalize
step; the thread lock is released only after it.

Dependencies: asyncio, ai_mentor.core.agentic_system.mentor, ai_mentor.application.services
System role: Streaming Service
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ai_mentor.application.services.prompt_builder import PromptBuilder
from ai_mentor.application.services.summarization_service import SummarizationService
from ai_mentor.application.services.thread_guard import validate_content
from ai_mentor.application.services.turn_pipeline import TurnResult, persist_turn, prepare_turn
from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry
from ai_mentor.core.exceptions import CompletionError
from ai_mentor.core.thread_locks import ThreadLockRegistry, thread_locks
from ai_mentor.core.token_counter import TokenCounter

logger = logging.getLogger(__name__)

_END = object()

# Strong references to producer tasks until they finish.
_background_tasks: set[asyncio.Task] = set()


class MentorStream:
    """
    Handle to one streamed turn.

    Attributes:
        thread_id: Thread being answered
        user_message_id: Id the USER message is stored under
        context: Retrieved context entries used for the prompt
        completion: Future resolving to the persisted TurnResult, or failing
            with the error that ended the stream
    """

    def __init__(self, thread_id: UUID, user_message_id: UUID, context: list[PromptEntry]) -> None:
        self.thread_id = thread_id
        self.user_message_id = user_message_id
        self.context = context
        self.completion: asyncio.Future[TurnResult] = asyncio.get_running_loop().create_future()
        self.completion.add_done_callback(_consume_exception)
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    async def tokens(self) -> AsyncIterator[str]:
        """
        Yield tokens as the model produces them.

        Raises:
            CompletionError: If the model stream fails
            PersistenceError: If the finalize step fails
        """
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            if isinstance(item, BaseException):
                raise item
            yield item

    def _push(self, token: str) -> None:
        self._queue.put_nowait(token)

    def _finish(self, result: TurnResult) -> None:
        if not self.completion.done():
            self.completion.set_result(result)
        self._queue.put_nowait(_END)

    def _fail(self, error: BaseException) -> None:
        if not self.completion.done():
            self.completion.set_exception(error)
        self._queue.put_nowait(error)

    def _cancel(self) -> None:
        self.completion.cancel()
        self._queue.put_nowait(_END)


def _consume_exception(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


class StreamingService:
    """Streamed mentor turns with background finalize."""

    def __init__(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        llm: MentorLLM,
        summarizer: SummarizationService,
        prompt_builder: PromptBuilder,
        token_counter: TokenCounter,
        locks: ThreadLockRegistry = thread_locks,
    ) -> None:
        """
        Initialize streaming service.

        Args:
            db: Request session used for guard, summarization and prompt assembly
            session_factory: Factory for the finalize session, which outlives the request
            llm: Completion backend
            summarizer: Summarization service bound to db
            prompt_builder: Prompt builder bound to db
            token_counter: Token counter for finalize
            locks: Thread lock registry
        """
        self.db = db
        self.session_factory = session_factory
        self.llm = llm
        self.summarizer = summarizer
        self.prompt_builder = prompt_builder
        self.token_counter = token_counter
        self.locks = locks

    async def stream_message(
        self,
        thread_id: UUID,
        user_id: UUID,
        content: str,
        message_id: UUID | None = None,
    ) -> MentorStream:
        """
        Start a streamed mentor turn.

        Errors before the stream opens (validation, guard, summary
        persistence) raise here and open nothing.

        Args:
            thread_id: Thread UUID
            user_id: Caller, must own the thread
            content: Student message
            message_id: Optional client id for the USER message

        Returns:
            MentorStream whose tokens() yields the reply and whose completion
            future resolves to the persisted turn
        """
        validate_content(content)
        temp_id = message_id or uuid4()
        logger.info(f"{__name__}:stream_message - START thread_id={thread_id}")

        await self.locks.acquire(thread_id)
        try:
            turn = await prepare_turn(
                self.db,
                self.summarizer,
                self.prompt_builder,
                thread_id,
                user_id,
                content,
                temp_id,
            )
        except BaseException:
            self.locks.release(thread_id)
            raise

        stream = MentorStream(thread_id=turn.thread.id, user_message_id=temp_id, context=turn.context)
        task = asyncio.create_task(self._produce(stream, thread_id, turn.entries, content))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return stream

    async def _produce(
        self,
        stream: MentorStream,
        lock_key: UUID,
        entries: list[PromptEntry],
        content: str,
    ) -> None:
        parts: list[str] = []
        try:
            # Step 1: stream tokens
            async for token in self.llm.astream(entries):
                parts.append(token)
                stream._push(token)
            reply = "".join(parts).strip()
            if not reply:
                raise CompletionError(
                    "Completion returned no text",
                    operation="stream",
                    details={"model": self.llm.model_id},
                )

            # Step 2: finalize on a session independent of the request
            async with self.session_factory() as db:
                result = await persist_turn(
                    db,
                    self.token_counter,
                    self.llm.model_id,
                    stream.thread_id,
                    content,
                    reply,
                    stream.user_message_id,
                )
            stream._finish(result)
            logger.info(
                f"{__name__}:_produce - Finalized thread_id={stream.thread_id}, chunks={len(parts)}"
            )
        except asyncio.CancelledError:
            logger.warning(f"{__name__}:_produce - Cancelled thread_id={stream.thread_id}")
            stream._cancel()
            raise
        except Exception as e:
            logger.error(
                f"{__name__}:_produce - FAILED: {type(e).__name__}",
                extra={"thread_id": str(stream.thread_id), "error": str(e)},
            )
            stream._fail(e)
        finally:
            self.locks.release(lock_key)
