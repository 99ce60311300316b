"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, ai_mentor.api, ai_mentor.observability, ai_mentor.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_mentor import __version__
from ai_mentor.api.deps import get_service_cache
from ai_mentor.api.routers import (
    chat_router,
    chat_stream_router,
    documents_router,
    health_router,
    judge_router,
    threads_router,
)
from ai_mentor.configs import get_settings
from ai_mentor.core.agentic_system.judge.judge_prompt import register_judge_prompt
from ai_mentor.core.agentic_system.mentor.mentor_prompt import register_mentor_prompts
from ai_mentor.observability.logger import configure_logging
from ai_mentor.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging, shares the service cache through app state and, when
    Langfuse is enabled, registers the local prompt templates.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    cache = get_service_cache()
    app.state.service_cache = cache

    registry = cache.prompt_registry
    if registry.is_enabled:
        try:
            register_mentor_prompts(registry, settings.llm.chat_model, settings.llm.temperature)
            register_judge_prompt(registry, settings.llm.judge_model, settings.llm.judge_temperature)
            logger.info("Prompt templates registered with Langfuse")
        except Exception as e:
            logger.warning("Prompt registration failed, using local templates", extra={"error": str(e)})

    yield

    # Shutdown
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="AI Mentor API",
        description="Lesson-scoped AI mentor conversations with retrieval, summarization and task judging",
        version=__version__,
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat_stream_router)
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(threads_router, prefix=settings.api_prefix)
    app.include_router(chat_router, prefix=settings.api_prefix)
    app.include_router(judge_router, prefix=settings.api_prefix)
    app.include_router(documents_router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "ai_mentor.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
