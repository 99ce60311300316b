"""Mentor chat: prompts, prompt entries and the completion backend."""

from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM
from ai_mentor.core.agentic_system.mentor.mentor_schema import (
    PromptEntry,
    to_langchain_messages,
    to_presentation_role,
)

__all__ = ["MentorLLM", "PromptEntry", "to_langchain_messages", "to_presentation_role"]
