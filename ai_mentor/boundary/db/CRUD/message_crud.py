"""
Message CRUD operations.

Queries over a thread's typed, append-only history: live history for
prompt assembly, budget sums, archiving and role upserts for the single
live SYSTEM and SUMMARY rows.

Dependencies: sqlalchemy, ai_mentor.boundary.db.models
System role: Message persistence operations
"""

from datetime import timedelta
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.base import utc_now
from ai_mentor.boundary.db.models.thread_model import MessageModel, MessageRole
from ai_mentor.boundary.db.CRUD.base_crud import BaseCRUD

CONVERSATION_ROLES = (MessageRole.USER, MessageRole.MENTOR)


class MessageCRUD(BaseCRUD[MessageModel]):
    """CRUD operations for MessageModel."""

    def __init__(self) -> None:
        super().__init__(MessageModel)

    async def get_history(
        self,
        session: AsyncSession,
        thread_id: UUID,
        archived: bool | None = False,
        roles: Iterable[MessageRole] = CONVERSATION_ROLES,
    ) -> Sequence[MessageModel]:
        """
        Retrieve conversation messages of a thread in creation order.

        SYSTEM and SUMMARY rows are excluded unless asked for explicitly.

        Args:
            session: Async database session
            thread_id: Thread UUID
            archived: False for live history, True for archived only, None for both
            roles: Roles to include

        Returns:
            Sequence of MessageModel ordered by created_at
        """
        stmt = select(MessageModel).where(
            MessageModel.thread_id == thread_id,
            MessageModel.role.in_(list(roles)),
        )
        if archived is not None:
            stmt = stmt.where(MessageModel.archived.is_(archived))
        stmt = stmt.order_by(MessageModel.created_at, MessageModel.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_live_by_role(
        self,
        session: AsyncSession,
        thread_id: UUID,
        role: MessageRole,
    ) -> MessageModel | None:
        """Return the live (non-archived) row of a singleton role, if any."""
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.thread_id == thread_id,
                MessageModel.role == role,
                MessageModel.archived.is_(False),
            )
            .order_by(MessageModel.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_token_sum(self, session: AsyncSession, thread_id: UUID) -> int:
        """
        Sum token counts of live USER and MENTOR messages.

        Returns:
            Token sum, 0 for an empty thread
        """
        stmt = select(func.coalesce(func.sum(MessageModel.token_count), 0)).where(
            MessageModel.thread_id == thread_id,
            MessageModel.archived.is_(False),
            MessageModel.role.in_(CONVERSATION_ROLES),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def archive(self, session: AsyncSession, ids: Sequence[UUID]) -> int:
        """
        Mark messages as archived.

        Returns:
            Number of rows updated
        """
        if not ids:
            return 0
        stmt = (
            update(MessageModel)
            .where(MessageModel.id.in_(list(ids)))
            .values(archived=True)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def upsert_live(
        self,
        session: AsyncSession,
        thread_id: UUID,
        role: MessageRole,
        content: str,
        token_count: int,
    ) -> MessageModel:
        """
        Replace the content of the live row for a singleton role, or create it.

        Used for SYSTEM and SUMMARY, which have at most one live row per thread.

        Args:
            session: Async database session
            thread_id: Thread UUID
            role: MessageRole.SYSTEM or MessageRole.SUMMARY
            content: New text
            token_count: Tokens of the new text

        Returns:
            The created or updated MessageModel
        """
        existing = await self.get_live_by_role(session, thread_id, role)
        if existing is None:
            return await self.create(
                session,
                thread_id=thread_id,
                role=role,
                content=content,
                token_count=token_count,
            )
        existing.content = content
        existing.token_count = token_count
        await session.flush()
        return existing

    async def create_turn(
        self,
        session: AsyncSession,
        thread_id: UUID,
        user_content: str,
        user_tokens: int,
        mentor_content: str,
        mentor_tokens: int,
        user_message_id: UUID | None = None,
    ) -> tuple[MessageModel, MessageModel]:
        """
        Persist a USER message and the MENTOR reply to it.

        The reply is stamped one microsecond after the question so the pair
        keeps its order in history even within the same clock tick.

        Returns:
            (user_message, mentor_message)
        """
        now = utc_now()
        user_fields = {
            "thread_id": thread_id,
            "role": MessageRole.USER,
            "content": user_content,
            "token_count": user_tokens,
            "created_at": now,
        }
        if user_message_id is not None:
            user_fields["id"] = user_message_id
        user_message = MessageModel(**user_fields)
        mentor_message = MessageModel(
            thread_id=thread_id,
            role=MessageRole.MENTOR,
            content=mentor_content,
            token_count=mentor_tokens,
            created_at=now + timedelta(microseconds=1),
        )
        session.add_all([user_message, mentor_message])
        await session.flush()
        return user_message, mentor_message


message_crud = MessageCRUD()
