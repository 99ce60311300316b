"""
Dependency injection container.

Factory functions for FastAPI dependencies. Model clients are built once
per process in ServiceCache; services are built per request around the
request's database session.

Dependencies: ai_mentor.configs, ai_mentor.application, ai_mentor.boundary
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ai_mentor.application.services import (
    ChatService,
    DocumentService,
    JudgeService,
    PromptBuilder,
    RetrievalService,
    StreamingService,
    SummarizationService,
    ThreadService,
)
from ai_mentor.boundary.db import get_async_db, get_async_session_factory
from ai_mentor.boundary.vdb import FixedDimensionEmbeddings, PgVectorStore
from ai_mentor.configs import Settings, get_settings
from ai_mentor.core.agentic_system.judge import TaskJudge
from ai_mentor.core.agentic_system.mentor import MentorLLM
from ai_mentor.core.thread_locks import thread_locks
from ai_mentor.core.token_counter import TokenCounter, token_counter
from ai_mentor.observability.prompt_registry import PromptRegistry


class ServiceCache:
    """Container for process-wide model clients."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._mentor_llm = None
        self._summary_llm = None
        self._task_judge = None
        self._embeddings = None
        self._vector_store = None
        self._prompt_registry = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def token_counter(self) -> TokenCounter:
        return token_counter

    @property
    def mentor_llm(self) -> MentorLLM:
        """Get cached chat backend for mentor replies and welcome messages."""
        if self._mentor_llm is None:
            llm = self.settings.llm
            self._mentor_llm = MentorLLM(
                model_id=llm.chat_model,
                temperature=llm.temperature,
                max_tokens=self.settings.mentor.max_tokens,
                timeout_seconds=llm.completion_timeout_seconds,
                google_api_key=llm.google_api_key,
            )
        return self._mentor_llm

    @property
    def summary_llm(self) -> MentorLLM:
        """Get cached chat backend for history summaries."""
        if self._summary_llm is None:
            llm = self.settings.llm
            self._summary_llm = MentorLLM(
                model_id=llm.summary_model,
                temperature=0.0,
                max_tokens=self.settings.mentor.max_tokens,
                timeout_seconds=llm.completion_timeout_seconds,
                google_api_key=llm.google_api_key,
            )
        return self._summary_llm

    @property
    def task_judge(self) -> TaskJudge:
        if self._task_judge is None:
            llm = self.settings.llm
            self._task_judge = TaskJudge(
                model_id=llm.judge_model,
                temperature=llm.judge_temperature,
                timeout_seconds=llm.completion_timeout_seconds,
                google_api_key=llm.google_api_key,
            )
        return self._task_judge

    @property
    def embeddings(self) -> FixedDimensionEmbeddings:
        """Get cached embedding client shared by ingestion and retrieval."""
        if self._embeddings is None:
            llm = self.settings.llm
            self._embeddings = FixedDimensionEmbeddings(
                model_id=llm.embedding_model,
                dimension=llm.embedding_dimension,
                timeout_seconds=llm.embedding_timeout_seconds,
                max_attempts=llm.embedding_max_attempts,
                google_api_key=llm.google_api_key,
            )
        return self._embeddings

    @property
    def vector_store(self) -> PgVectorStore:
        if self._vector_store is None:
            self._vector_store = PgVectorStore(self.embeddings)
        return self._vector_store

    @property
    def prompt_registry(self) -> PromptRegistry:
        if self._prompt_registry is None:
            self._prompt_registry = PromptRegistry(self.settings.observability)
        return self._prompt_registry

    def clear(self) -> None:
        """Clear all cached instances."""
        self._mentor_llm = None
        self._summary_llm = None
        self._task_judge = None
        self._embeddings = None
        self._vector_store = None
        self._prompt_registry = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def build_turn_components(
    db: AsyncSession,
    cache: ServiceCache,
) -> tuple[SummarizationService, PromptBuilder]:
    """Summarizer and prompt builder bound to one session."""
    settings = cache.settings.mentor
    summarizer = SummarizationService(
        db=db,
        llm=cache.summary_llm,
        token_counter=cache.token_counter,
        settings=settings,
        prompt_registry=cache.prompt_registry,
    )
    retrieval = RetrievalService(db=db, vector_store=cache.vector_store, settings=settings)
    return summarizer, PromptBuilder(db=db, retrieval=retrieval)


def build_streaming_service(db: AsyncSession, cache: ServiceCache) -> StreamingService:
    """Streaming service for a session opened outside request injection (WebSocket)."""
    summarizer, prompt_builder = build_turn_components(db, cache)
    return StreamingService(
        db=db,
        session_factory=get_async_session_factory(),
        llm=cache.mentor_llm,
        summarizer=summarizer,
        prompt_builder=prompt_builder,
        token_counter=cache.token_counter,
        locks=thread_locks,
    )


def get_thread_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> ThreadService:
    return ThreadService(
        db=db,
        llm=cache.mentor_llm,
        token_counter=cache.token_counter,
        locks=thread_locks,
        prompt_registry=cache.prompt_registry,
    )


def get_chat_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> ChatService:
    summarizer, prompt_builder = build_turn_components(db, cache)
    return ChatService(
        db=db,
        llm=cache.mentor_llm,
        summarizer=summarizer,
        prompt_builder=prompt_builder,
        token_counter=cache.token_counter,
        locks=thread_locks,
    )


def get_streaming_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> StreamingService:
    return build_streaming_service(db, cache)


def get_judge_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> JudgeService:
    return JudgeService(
        db=db,
        judge=cache.task_judge,
        locks=thread_locks,
        prompt_registry=cache.prompt_registry,
    )


def get_document_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    return DocumentService(db=db, embeddings=cache.embeddings)
