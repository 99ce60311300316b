"""
Mentor prompt entry schemas.

A prompt is an ordered list of PromptEntry. Roles are the stored
MessageRole values; the wire form maps SUMMARY to SYSTEM.

Dependencies: pydantic, langchain_core.messages
System role: Data contracts between prompt assembly and the chat backend
"""

from typing import Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from ai_mentor.boundary.db.models.thread_model import MessageRole

EntrySource = Literal["system", "summary", "history", "turn", "retrieval"]

RETRIEVAL_SOURCE = "retrieval"


class PromptEntry(BaseModel):
    """One message of an assembled prompt."""

    id: str | None = Field(default=None, description="Stored message id or temporary turn id")
    role: MessageRole = Field(..., description="Stored role of the entry")
    content: str = Field(..., description="Entry text")
    source: EntrySource = Field(default="history", description="Where the entry came from")

    @property
    def presentation_role(self) -> MessageRole:
        return to_presentation_role(self.role)


def to_presentation_role(role: MessageRole) -> MessageRole:
    """Map a stored role to the role sent over the wire."""
    if role == MessageRole.SUMMARY:
        return MessageRole.SYSTEM
    return role


def to_langchain_messages(entries: list[PromptEntry]) -> list[BaseMessage]:
    """
    Convert prompt entries to LangChain chat messages.

    Args:
        entries: Ordered prompt entries

    Returns:
        Messages in the same order
    """
    messages: list[BaseMessage] = []
    for entry in entries:
        role = entry.presentation_role
        if role == MessageRole.SYSTEM:
            messages.append(SystemMessage(content=entry.content))
        elif role == MessageRole.USER:
            messages.append(HumanMessage(content=entry.content))
        else:
            messages.append(AIMessage(content=entry.content))
    return messages
