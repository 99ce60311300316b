"""
Test suite for the Langfuse prompt registry.

The Langfuse client is mocked; no network access.

System role: Verification of prompt versioning and fallback
"""

from unittest.mock import MagicMock

import pytest
from langchain_core.prompts import PromptTemplate

from ai_mentor.configs.observability import ObservabilitySettings
from ai_mentor.observability.prompt_registry import PromptRegistry, to_langfuse_text

FALLBACK = PromptTemplate.from_template("Summarize in {language}:\n{content}")


@pytest.fixture
def settings() -> ObservabilitySettings:
    return ObservabilitySettings(enable_tracing=False, prompt_label="production")


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.create_prompt.return_value = MagicMock(version=3)
    return client


class TestLangfuseText:
    """Test suite for placeholder conversion."""

    def test_variables_use_double_braces(self) -> None:
        assert to_langfuse_text(FALLBACK) == "Summarize in {{language}}:\n{{content}}"

    def test_escaped_braces_untouched(self) -> None:
        """Test literal JSON braces are not turned into variables."""
        # Arrange
        template = PromptTemplate.from_template('Answer {{"score": number}} in {language}')

        # Act
        text = to_langfuse_text(template)

        # Assert
        assert text == 'Answer {{"score": number}} in {{language}}'


class TestPromptRegistry:
    """Test suite for PromptRegistry."""

    def test_disabled_registry_returns_fallback(self, settings: ObservabilitySettings) -> None:
        # Arrange
        registry = PromptRegistry(settings)

        # Act & Assert
        assert registry.is_enabled is False
        assert registry.resolve("mentor-summary", FALLBACK) is FALLBACK
        assert registry.register_prompt("mentor-summary", FALLBACK, model="gemini-test") is None

    def test_register_creates_text_prompt(self, settings: ObservabilitySettings, mock_client: MagicMock) -> None:
        """Test templates are registered as text prompts with model config."""
        # Arrange
        registry = PromptRegistry(settings, client=mock_client)

        # Act
        registry.register_prompt("mentor-summary", FALLBACK, model="gemini-test", temperature=0.0)

        # Assert
        kwargs = mock_client.create_prompt.call_args.kwargs
        assert kwargs["name"] == "mentor-summary"
        assert kwargs["type"] == "text"
        assert kwargs["prompt"] == "Summarize in {{language}}:\n{{content}}"
        assert kwargs["config"] == {"model": "gemini-test", "temperature": 0.0}
        assert kwargs["labels"] == ["production"]

    def test_resolve_uses_registry_version(self, settings: ObservabilitySettings, mock_client: MagicMock) -> None:
        # Arrange
        mock_client.get_prompt.return_value = MagicMock(
            version=4,
            get_langchain_prompt=MagicMock(return_value="New summary in {language}: {content}"),
        )
        registry = PromptRegistry(settings, client=mock_client)

        # Act
        template = registry.resolve("mentor-summary", FALLBACK)

        # Assert
        assert template.format(language="English", content="x") == "New summary in English: x"
        mock_client.get_prompt.assert_called_once_with("mentor-summary", label="production", type="text")

    def test_resolve_rejects_changed_variables(
        self, settings: ObservabilitySettings, mock_client: MagicMock
    ) -> None:
        """Test a registry version with different variables is ignored."""
        # Arrange
        mock_client.get_prompt.return_value = MagicMock(
            version=5,
            get_langchain_prompt=MagicMock(return_value="Summarize {content} for {audience}"),
        )
        registry = PromptRegistry(settings, client=mock_client)

        # Act & Assert
        assert registry.resolve("mentor-summary", FALLBACK) is FALLBACK

    def test_resolve_falls_back_on_fetch_error(
        self, settings: ObservabilitySettings, mock_client: MagicMock
    ) -> None:
        # Arrange
        mock_client.get_prompt.side_effect = RuntimeError("not found")
        registry = PromptRegistry(settings, client=mock_client)

        # Act & Assert
        assert registry.resolve("mentor-summary", FALLBACK) is FALLBACK
