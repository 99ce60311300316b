"""
Mentor pipeline configuration.

Budget, retrieval and completion knobs read by the summarization,
retrieval and completion components. Passed explicitly into each
component instead of living as module constants.

Dependencies: pydantic, pydantic_settings
System role: Conversation pipeline tuning
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ai_mentor.configs.base import BaseSettings


class MentorSettings(BaseSettings):
    """Token budget and retrieval configuration for mentor threads."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MENTOR_",
        case_sensitive=False,
        extra="ignore",
    )

    threshold: int = Field(
        default=100,
        ge=1,
        description="Live USER/MENTOR token sum above which history is summarized",
    )
    top_k: int = Field(default=5, ge=1, description="Seed chunks fetched per query")
    chunk_neighbours: int = Field(
        default=2,
        ge=0,
        description="Neighbour window; ceil(n/2) chunks are taken on either side",
    )
    similarity_threshold: float = Field(
        default=0.5,
        ge=-1.0,
        le=1.0,
        description="Seed chunks must score strictly above this cosine similarity",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        description="Upper bound on generated tokens per completion",
    )
