"""
Prompt builder.

Assembles the ordered model input for a turn: SYSTEM, SUMMARY, live
history, the new USER turn and retrieved context.

Dependencies: ai_mentor.application.services.retrieval_service, ai_mentor.boundary.db
System role: Prompt Builder
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services.retrieval_service import RetrievalService
from ai_mentor.boundary.db.CRUD.message_crud import message_crud
from ai_mentor.boundary.db.models.thread_model import MessageRole, ThreadModel
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry

logger = logging.getLogger(__name__)


class PromptBuilder:
    """Ordered context assembly for one thread turn."""

    def __init__(self, db: AsyncSession, retrieval: RetrievalService) -> None:
        self.db = db
        self.retrieval = retrieval

    async def build_prompt(
        self,
        thread: ThreadModel,
        new_user_content: str,
        temp_message_id: str | None = None,
    ) -> list[PromptEntry]:
        """
        Build the prompt for a new user turn.

        The retrieval query is the new content joined with the last entry
        assembled before the turn, so follow-ups retrieve with context.

        Args:
            thread: Thread being continued
            new_user_content: Text of the new USER turn
            temp_message_id: Client or server id of the not yet persisted turn

        Returns:
            Entries ordered SYSTEM, SUMMARY, history, USER turn, context
        """
        entries: list[PromptEntry] = []

        system = await message_crud.get_live_by_role(self.db, thread.id, MessageRole.SYSTEM)
        if system is not None:
            entries.append(
                PromptEntry(id=str(system.id), role=MessageRole.SYSTEM, content=system.content, source="system")
            )
        summary = await message_crud.get_live_by_role(self.db, thread.id, MessageRole.SUMMARY)
        if summary is not None:
            entries.append(
                PromptEntry(id=str(summary.id), role=MessageRole.SUMMARY, content=summary.content, source="summary")
            )
        history = await message_crud.get_history(self.db, thread.id, archived=False)
        entries.extend(
            PromptEntry(id=str(message.id), role=message.role, content=message.content, source="history")
            for message in history
        )

        query = new_user_content
        if entries:
            query = f"{new_user_content}\n{entries[-1].content}"

        entries.append(
            PromptEntry(id=temp_message_id, role=MessageRole.USER, content=new_user_content, source="turn")
        )
        context = await self.retrieval.get_context(query, thread.lesson_id)
        entries.extend(context)

        logger.info(
            f"{__name__}:build_prompt - Built {len(entries)} entries",
            extra={"thread_id": str(thread.id), "history": len(history), "context": len(context)},
        )
        return entries
