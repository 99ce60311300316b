"""FastAPI dependencies: caller identity and service factories."""

from ai_mentor.api.deps.auth import (
    CurrentUser,
    UserRole,
    get_current_user,
    get_websocket_user,
    require_content_manager,
)
from ai_mentor.api.deps.dependencies import (
    ServiceCache,
    build_streaming_service,
    get_chat_service,
    get_document_service,
    get_judge_service,
    get_service_cache,
    get_streaming_service,
    get_thread_service,
)

__all__ = [
    "CurrentUser",
    "UserRole",
    "get_current_user",
    "get_websocket_user",
    "require_content_manager",
    "ServiceCache",
    "build_streaming_service",
    "get_chat_service",
    "get_document_service",
    "get_judge_service",
    "get_service_cache",
    "get_streaming_service",
    "get_thread_service",
]
