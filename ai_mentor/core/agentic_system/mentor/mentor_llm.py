"""
Mentor completion backend.

Single-shot and streamed completions over ChatGoogleGenerativeAI with hard
timeouts. Every backend failure surfaces as CompletionError so callers deal
with one upstream error type.

Dependencies: langchain_google_genai, langchain_core
System role: Completion / Streaming backend for mentor, summary and welcome calls
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ai_mentor.core.agentic_system.mentor.mentor_schema import PromptEntry, to_langchain_messages
from ai_mentor.core.exceptions import CompletionError, ValidationError

logger = logging.getLogger(__name__)


def content_to_text(content: Any) -> str:
    """Flatten string or list-of-parts message content to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str)
            else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content or "")


class MentorLLM:
    """
    Chat model wrapper used for mentor turns, summaries and welcome messages.

    Attributes:
        model_id: Model identifier, also used for token accounting
    """

    def __init__(
        self,
        model_id: str,
        temperature: float = 0.4,
        max_tokens: int = 1024,
        timeout_seconds: float = 60.0,
        model: BaseChatModel | None = None,
        google_api_key: str | None = None,
    ) -> None:
        """
        Initialize the completion backend.

        Args:
            model_id: Gemini model identifier
            temperature: Sampling temperature
            max_tokens: Cap on generated tokens
            timeout_seconds: Hard timeout per call (per chunk when streaming)
            model: Preconfigured chat model, mainly for tests
            google_api_key: API key; the client reads GOOGLE_API_KEY when None
        """
        self.model_id = model_id
        self._timeout = timeout_seconds
        if model is None:
            kwargs: dict[str, Any] = {
                "model": model_id,
                "temperature": temperature,
                "max_output_tokens": max_tokens,
            }
            if google_api_key:
                kwargs["google_api_key"] = google_api_key
            model = ChatGoogleGenerativeAI(**kwargs)
        self._model = model

    async def chat(self, entries: list[PromptEntry]) -> str:
        """
        Complete an assembled prompt.

        Args:
            entries: Ordered prompt entries

        Returns:
            Completion text

        Raises:
            ValidationError: If entries is empty
            CompletionError: On backend failure, timeout or empty completion
        """
        if not entries:
            raise ValidationError("Prompt must not be empty", field="entries")
        return await self._invoke(to_langchain_messages(entries), operation="chat")

    async def generate(self, prompt: str) -> str:
        """
        Complete a standalone instruction (summary, welcome message).

        Raises:
            ValidationError: If prompt is blank
            CompletionError: On backend failure, timeout or empty completion
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt must not be empty", field="prompt")
        return await self._invoke([HumanMessage(content=prompt)], operation="generate")

    async def astream(self, entries: list[PromptEntry]) -> AsyncIterator[str]:
        """
        Stream completion tokens for an assembled prompt.

        The timeout applies to each received chunk. Empty chunks are skipped.

        Yields:
            Text fragments in order

        Raises:
            ValidationError: If entries is empty
            CompletionError: On backend failure or chunk timeout
        """
        if not entries:
            raise ValidationError("Prompt must not be empty", field="entries")

        messages = to_langchain_messages(entries)
        logger.info(f"{__name__}:astream - Starting LLM stream (model={self.model_id})")
        stream = self._model.astream(messages).__aiter__()
        token_count = 0
        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(stream.__anext__(), timeout=self._timeout)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    raise CompletionError(
                        "Completion stream timed out",
                        operation="stream",
                        details={"model": self.model_id, "timeout": self._timeout},
                    ) from e
                except CompletionError:
                    raise
                except Exception as e:
                    raise CompletionError(
                        f"Completion stream failed: {type(e).__name__}",
                        operation="stream",
                        details={"model": self.model_id},
                    ) from e
                text = content_to_text(chunk.content)
                if text:
                    token_count += 1
                    yield text
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        logger.info(f"{__name__}:astream - Stream finished: chunks={token_count}")

    async def _invoke(self, messages: list[BaseMessage], operation: str) -> str:
        try:
            response = await asyncio.wait_for(self._model.ainvoke(messages), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise CompletionError(
                "Completion timed out",
                operation=operation,
                details={"model": self.model_id, "timeout": self._timeout},
            ) from e
        except Exception as e:
            raise CompletionError(
                f"Completion failed: {type(e).__name__}",
                operation=operation,
                details={"model": self.model_id},
            ) from e

        text = content_to_text(response.content).strip()
        if not text:
            raise CompletionError(
                "Completion returned no text",
                operation=operation,
                details={"model": self.model_id},
            )
        return text
