"""
Thread access checks shared by chat, streaming, judge and thread services.

Dependencies: ai_mentor.boundary.db
System role: Ownership and lifecycle preconditions
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.boundary.db.CRUD.thread_crud import thread_crud
from ai_mentor.boundary.db.models.thread_model import ThreadModel, ThreadStatus
from ai_mentor.core.exceptions import (
    ThreadNotFoundError,
    ThreadOwnershipError,
    ThreadStateError,
    ValidationError,
)


async def load_thread(
    db: AsyncSession,
    thread_id: UUID,
    user_id: UUID,
    allow_admin: bool = False,
) -> ThreadModel:
    """
    Load a thread the caller may access.

    Args:
        db: Async database session
        thread_id: Thread UUID
        user_id: Caller
        allow_admin: Skip the ownership check (read-only admin access)

    Raises:
        ThreadNotFoundError: Unknown thread
        ThreadOwnershipError: Caller does not own the thread
    """
    thread = await thread_crud.get_by_id(db, thread_id)
    if thread is None:
        raise ThreadNotFoundError(str(thread_id))
    if not allow_admin and thread.user_id != user_id:
        raise ThreadOwnershipError(str(thread_id), str(user_id))
    return thread


def ensure_active(thread: ThreadModel) -> None:
    """Raise ThreadStateError unless the thread is ACTIVE."""
    if thread.status != ThreadStatus.ACTIVE:
        raise ThreadStateError(str(thread.id), thread.status.value)


async def load_active_thread(db: AsyncSession, thread_id: UUID, user_id: UUID) -> ThreadModel:
    """Load an owned thread and require it to be ACTIVE."""
    thread = await load_thread(db, thread_id, user_id)
    ensure_active(thread)
    return thread


def validate_content(content: str | None) -> str:
    """Reject blank turn content before anything touches the store."""
    if content is None or not content.strip():
        raise ValidationError("Message content must not be empty", field="content")
    return content
