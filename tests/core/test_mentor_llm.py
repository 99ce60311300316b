"""
Test suite for MentorLLM.

Uses LangChain's fake chat model for the happy path and mocks for backend
failures.

System role: Verification of the completion backend wrapper
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from ai_mentor.boundary.db.models import MessageRole
from ai_mentor.core.agentic_system.mentor.mentor_llm import MentorLLM, content_to_text
from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry, to_langchain_messages
from ai_mentor.core.exceptions import CompletionError, ValidationError


def _entries() -> list[PromptEntry]:
    return [
        PromptEntry(role=MessageRole.SYSTEM, content="You are a mentor.", source="system"),
        PromptEntry(role=MessageRole.USER, content="What is a fraction?", source="turn"),
    ]


def _fake_model(*replies: str) -> GenericFakeChatModel:
    return GenericFakeChatModel(messages=iter([AIMessage(content=reply) for reply in replies]))


class TestContentToText:
    """Test suite for content flattening."""

    def test_string_content(self) -> None:
        assert content_to_text("hello") == "hello"

    def test_list_of_parts(self) -> None:
        """Test Gemini-style part lists are joined."""
        # Act
        text = content_to_text([{"type": "text", "text": "Hel"}, "lo"])

        # Assert
        assert text == "Hello"

    def test_none_is_empty(self) -> None:
        assert content_to_text(None) == ""


class TestMentorLLMChat:
    """Test suite for MentorLLM.chat() and generate()."""

    @pytest.mark.asyncio
    async def test_chat_returns_completion(self) -> None:
        """Test the completion text is returned stripped."""
        # Arrange
        llm = MentorLLM(model_id="gemini-test", model=_fake_model("  A part of a whole.  "))

        # Act
        reply = await llm.chat(_entries())

        # Assert
        assert reply == "A part of a whole."

    @pytest.mark.asyncio
    async def test_chat_rejects_empty_prompt(self) -> None:
        """Test an empty entry list never reaches the backend."""
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock()
        llm = MentorLLM(model_id="gemini-test", model=model)

        # Act & Assert
        with pytest.raises(ValidationError):
            await llm.chat([])
        model.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_backend_failure_is_completion_error(self) -> None:
        """Test backend exceptions are wrapped."""
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("quota"))
        llm = MentorLLM(model_id="gemini-test", model=model)

        # Act & Assert
        with pytest.raises(CompletionError) as exc_info:
            await llm.chat(_entries())
        assert exc_info.value.details["operation"] == "chat"

    @pytest.mark.asyncio
    async def test_empty_completion_is_error(self) -> None:
        """Test a blank completion is treated as a failure."""
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock(return_value=AIMessage(content="   "))
        llm = MentorLLM(model_id="gemini-test", model=model)

        # Act & Assert
        with pytest.raises(CompletionError):
            await llm.generate("Summarize this")

    @pytest.mark.asyncio
    async def test_timeout_is_completion_error(self) -> None:
        """Test a slow backend is cut off at the timeout."""
        # Arrange
        async def slow(_messages):
            await asyncio.sleep(1)

        model = MagicMock()
        model.ainvoke = slow
        llm = MentorLLM(model_id="gemini-test", model=model, timeout_seconds=0.01)

        # Act & Assert
        with pytest.raises(CompletionError):
            await llm.generate("Summarize this")

    @pytest.mark.asyncio
    async def test_generate_rejects_blank_prompt(self) -> None:
        # Arrange
        llm = MentorLLM(model_id="gemini-test", model=_fake_model("unused"))

        # Act & Assert
        with pytest.raises(ValidationError):
            await llm.generate("  ")


class TestMentorLLMStream:
    """Test suite for MentorLLM.astream()."""

    @pytest.mark.asyncio
    async def test_stream_yields_reply_in_order(self) -> None:
        """Test concatenated chunks equal the full reply."""
        # Arrange
        llm = MentorLLM(model_id="gemini-test", model=_fake_model("Tell me about halves"))

        # Act
        chunks = [chunk async for chunk in llm.astream(_entries())]

        # Assert
        assert len(chunks) > 1
        assert "".join(chunks) == "Tell me about halves"

    @pytest.mark.asyncio
    async def test_stream_failure_is_completion_error(self) -> None:
        """Test a backend error mid-stream is wrapped."""
        # Arrange
        async def broken(_messages):
            yield AIMessage(content="partial")
            raise RuntimeError("connection reset")

        model = MagicMock()
        model.astream = broken
        llm = MentorLLM(model_id="gemini-test", model=model)

        # Act
        received: list[str] = []
        with pytest.raises(CompletionError):
            async for chunk in llm.astream(_entries()):
                received.append(chunk)

        # Assert
        assert received == ["partial"]


class TestPromptEntries:
    """Test suite for prompt entry conversion."""

    def test_summary_presented_as_system(self) -> None:
        """Test SUMMARY entries are sent as system messages."""
        # Arrange
        entry = PromptEntry(role=MessageRole.SUMMARY, content="so far", source="summary")

        # Act
        messages = to_langchain_messages([entry])

        # Assert
        assert entry.presentation_role == MessageRole.SYSTEM
        assert isinstance(messages[0], SystemMessage)

    def test_roles_map_in_order(self) -> None:
        """Test order and message classes are preserved."""
        # Arrange
        entries = _entries() + [PromptEntry(role=MessageRole.MENTOR, content="Good question.")]

        # Act
        messages = to_langchain_messages(entries)

        # Assert
        assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage]
        assert [m.content for m in messages] == [e.content for e in entries]
