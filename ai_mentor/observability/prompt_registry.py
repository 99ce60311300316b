"""
Langfuse prompt registry for versioned mentor prompts.

Registers the local text templates in Langfuse and fetches edited versions
back. When the registry is disabled or a prompt is missing, callers keep
using the local template.

Dependencies: langfuse, langchain_core.prompts, ai_mentor.configs
System role: Prompt version control and retrieval
"""

import logging
import re
from typing import Any

from langchain_core.prompts import PromptTemplate
from langfuse import Langfuse

from ai_mentor.configs.observability import ObservabilitySettings

logger = logging.getLogger(__name__)

_LANGCHAIN_VARIABLE = re.compile(r"(?<!\{)\{(\w+)\}(?!\})")


def to_langfuse_text(template: PromptTemplate) -> str:
    """Convert {var} placeholders to Langfuse {{var}} syntax."""
    return _LANGCHAIN_VARIABLE.sub(r"{{\1}}", template.template)


class PromptRegistry:
    """
    Langfuse-backed store for the mentor, summary, welcome and judge prompts.

    Example:
        >>> registry = PromptRegistry(get_settings().observability)
        >>> registry.register_prompt("mentor-system", MENTOR_SYSTEM_PROMPT, model="gemini-2.5-flash")
        >>> template = registry.resolve("mentor-system", MENTOR_SYSTEM_PROMPT)
    """

    def __init__(
        self,
        settings: ObservabilitySettings,
        client: Langfuse | None = None,
    ) -> None:
        self._label = settings.prompt_label
        self._client = client
        if client is not None:
            self._enabled = True
            return

        if not settings.enable_tracing:
            logger.info("Langfuse disabled, prompt registry inactive")
            self._enabled = False
            return
        if not settings.public_key or not settings.secret_key:
            logger.warning("Langfuse keys not configured, prompt registry inactive")
            self._enabled = False
            return

        self._client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
        )
        self._enabled = True
        logger.info("Prompt registry initialized: host=%s", settings.host)

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def register_prompt(
        self,
        name: str,
        template: PromptTemplate,
        model: str,
        temperature: float | None = None,
        labels: list[str] | None = None,
    ) -> Any:
        """
        Create a new Langfuse version of a text prompt.

        Args:
            name: Unique prompt identifier
            template: Local PromptTemplate
            model: Model the prompt is tuned for, stored in the prompt config
            temperature: Optional sampling temperature stored with the prompt
            labels: Labels for the new version, defaults to the configured label

        Returns:
            The created Langfuse prompt, or None if disabled
        """
        if not self._enabled or self._client is None:
            logger.debug("Prompt registry disabled, skipping registration: name=%s", name)
            return None

        config: dict[str, Any] = {"model": model}
        if temperature is not None:
            config["temperature"] = temperature

        prompt = self._client.create_prompt(
            name=name,
            type="text",
            prompt=to_langfuse_text(template),
            config=config,
            labels=labels or [self._label],
        )
        logger.info("Registered text prompt: name=%s version=%s", name, prompt.version)
        return prompt

    def resolve(self, name: str, fallback: PromptTemplate) -> PromptTemplate:
        """
        Return the registry version of a prompt, or the local fallback.

        Fetch failures are logged and never propagate: prompt editing must
        not take the mentor down.
        """
        if not self._enabled or self._client is None:
            return fallback
        try:
            prompt = self._client.get_prompt(name, label=self._label, type="text")
            template = PromptTemplate.from_template(prompt.get_langchain_prompt())
        except Exception as e:
            logger.warning(
                f"{__name__}:resolve - Prompt fetch failed, using local template",
                extra={"prompt_name": name, "error": str(e)},
            )
            return fallback

        if set(template.input_variables) != set(fallback.input_variables):
            logger.warning(
                f"{__name__}:resolve - Registry prompt variables differ, using local template",
                extra={"prompt_name": name, "variables": sorted(template.input_variables)},
            )
            return fallback
        logger.debug("Using prompt from registry: name=%s version=%s", name, prompt.version)
        return template
