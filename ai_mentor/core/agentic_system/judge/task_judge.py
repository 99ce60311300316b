"""
LLM task judge.

Scores a thread's student turns against the lesson conditions with a
deterministic Gemini call and parses the JSON verdict.

Dependencies: langchain_google_genai, langchain_core
System role: Judge backend for the Judge Service
"""

import asyncio
import json
import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ai_mentor.core.agentic_system.judge.judge_schema import JudgeVerdict
from ai_mentor.core.agentic_system.mentor.mentor_llm import content_to_text
from ai_mentor.core.exceptions import CompletionError

logger = logging.getLogger(__name__)


class TaskJudge:
    """
    LLM-as-judge for finished mentor threads.

    Usage:
        judge = TaskJudge(model_id="gemini-2.5-flash")
        verdict = await judge.evaluate(system_prompt, "student line 1\\nstudent line 2")
    """

    def __init__(
        self,
        model_id: str,
        temperature: float = 0.0,
        timeout_seconds: float = 60.0,
        model: BaseChatModel | None = None,
        google_api_key: str | None = None,
    ) -> None:
        self.model_id = model_id
        self._timeout = timeout_seconds
        if model is None:
            kwargs: dict[str, Any] = {"model": model_id, "temperature": temperature}
            if google_api_key:
                kwargs["google_api_key"] = google_api_key
            model = ChatGoogleGenerativeAI(**kwargs)
        self._model = model
        logger.info(f"Initialized task judge with {model_id}")

    async def evaluate(self, system_prompt: str, submission: str) -> JudgeVerdict:
        """
        Judge a submission.

        Args:
            system_prompt: Rendered judge prompt for the lesson
            submission: Student turns joined by newlines

        Returns:
            JudgeVerdict with clamped scores

        Raises:
            CompletionError: On backend failure, timeout or unparseable output
        """
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=submission)]
        try:
            response = await asyncio.wait_for(self._model.ainvoke(messages), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise CompletionError(
                "Judge timed out",
                operation="judge",
                details={"model": self.model_id, "timeout": self._timeout},
            ) from e
        except Exception as e:
            raise CompletionError(
                f"Judge failed: {type(e).__name__}",
                operation="judge",
                details={"model": self.model_id},
            ) from e

        verdict = self._parse_response(content_to_text(response.content))
        logger.info(
            "Judge verdict",
            extra={"score": verdict.score, "min_score": verdict.min_score, "max_score": verdict.max_score},
        )
        return verdict

    def _parse_response(self, response_text: str) -> JudgeVerdict:
        """
        Parse the judge JSON, tolerating markdown code fences.

        Scores are clamped so that 0 <= score, min_score <= max_score.
        """
        text = response_text
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]

        try:
            data = json.loads(text.strip())
            if not isinstance(data, dict):
                raise ValueError("verdict is not an object")
            max_score = max(0, int(data.get("maxScore", 0)))
            score = min(max_score, max(0, int(data.get("score", 0))))
            min_score = min(max_score, max(0, int(data.get("minScore", 0))))
            summary = str(data.get("summary", "")).strip()
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse judge response: {e}")
            logger.debug(f"Raw response: {response_text}")
            raise CompletionError(
                "Judge returned an unparseable verdict",
                operation="judge",
                details={"model": self.model_id},
            ) from e

        return JudgeVerdict(summary=summary, min_score=min_score, score=score, max_score=max_score)
