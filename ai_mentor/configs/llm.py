"""
LLM and embedding configuration settings.

Model identifiers, sampling and timeouts for the Gemini chat backend and the
embedding model shared by document ingestion and retrieval.

Dependencies: pydantic, pydantic_settings
System role: Completion and embedding backend configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ai_mentor.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Gemini chat and embedding model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    google_api_key: str | None = Field(
        default=None,
        description="Google Generative AI key (falls back to GOOGLE_API_KEY)",
    )
    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for mentor replies and welcome messages",
    )
    summary_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used to compact thread history",
    )
    judge_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used to evaluate a finished thread",
    )
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    judge_temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model shared by ingestion and retrieval",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Fixed vector size stored in document_chunks.embedding",
    )

    completion_timeout_seconds: float = Field(
        default=60.0,
        description="Hard timeout for a completion (per chunk when streaming)",
    )
    embedding_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for query embedding before retrieval degrades",
    )
    embedding_max_attempts: int = Field(
        default=3,
        description="Attempts for transient embedding failures",
    )
