"""
Google Generative AI embeddings with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so ingestion and retrieval always embed
with the same model and vector size. Transient API failures are retried with
exponential backoff; the whole call, retries included, is bounded by a
timeout. Vectors of the wrong size are rejected.

Dependencies: langchain_google_genai, tenacity
System role: Shared embedding model for chunk ingestion and query retrieval
"""

import asyncio
import logging
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from tenacity import (
    AsyncRetrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ai_mentor.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings:
    """
    Embedding client producing vectors of one fixed dimension.

    Attributes:
        model_id: Embedding model identifier
        dimension: Size of every returned vector
    """

    def __init__(
        self,
        model_id: str = "models/gemini-embedding-001",
        dimension: int = 1024,
        timeout_seconds: float = 10.0,
        max_attempts: int = 3,
        client: Embeddings | None = None,
        google_api_key: str | None = None,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model_id: Google embedding model ID
            dimension: Fixed dimension for all embeddings
            timeout_seconds: Upper bound per call, retries included
            max_attempts: Attempts for transient failures
            client: Preconfigured LangChain embeddings, mainly for tests
            google_api_key: API key; the client reads GOOGLE_API_KEY when None
        """
        self.model_id = model_id
        self.dimension = dimension
        self._timeout = timeout_seconds
        self._max_attempts = max_attempts
        if client is None:
            kwargs: dict[str, Any] = {"model": model_id}
            if google_api_key:
                kwargs["google_api_key"] = google_api_key
            client = GoogleGenerativeAIEmbeddings(**kwargs)
        self._client = client
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model_id}, "
            f"output_dimensionality={dimension}"
        )

    async def aembed_query(self, text: str) -> list[float]:
        """
        Embed a retrieval query.

        Raises:
            EmbeddingError: On timeout, exhausted retries or dimension mismatch
        """
        vectors = await self._run("embed_query", lambda: self._embed_query(text))
        return vectors[0]

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        """
        Embed document chunks.

        Raises:
            EmbeddingError: On timeout, exhausted retries or dimension mismatch
        """
        if not texts:
            return []
        return await self._run("embed_documents", lambda: self._embed_documents(texts))

    async def _embed_query(self, text: str) -> list[list[float]]:
        vector = await asyncio.to_thread(
            self._client.embed_query,
            text,
            output_dimensionality=self.dimension,
        )
        return [vector]

    async def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        return await asyncio.to_thread(
            self._client.embed_documents,
            texts,
            output_dimensionality=self.dimension,
        )

    async def _run(self, operation: str, call) -> list[list[float]]:
        try:
            vectors = await asyncio.wait_for(self._with_retry(operation, call), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                "Embedding timed out",
                operation=operation,
                details={"model": self.model_id, "timeout": self._timeout},
            ) from e
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(
                f"Embedding failed: {type(e).__name__}",
                operation=operation,
                details={"model": self.model_id},
            ) from e

        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingError(
                    "Embedding dimension mismatch",
                    operation=operation,
                    details={"expected": self.dimension, "actual": len(vector)},
                )
        return [list(vector) for vector in vectors]

    async def _with_retry(self, operation: str, call) -> list[list[float]]:
        async for attempt in AsyncRetrying(
            retry=retry_if_not_exception_type(EmbeddingError),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential_jitter(initial=0.2, max=2, jitter=0.2),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:{operation} - Retry {retry_state.attempt_number}/{self._max_attempts}"
            ),
            reraise=True,
        ):
            with attempt:
                return await call()
        raise EmbeddingError("Embedding retries exhausted", operation=operation)
