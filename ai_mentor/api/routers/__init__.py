"""API routers."""

from .chat import router as chat_router
from .chat_stream import router as chat_stream_router
from .documents import router as documents_router
from .health import router as health_router
from .judge import router as judge_router
from .threads import router as threads_router

__all__ = [
    "chat_router",
    "chat_stream_router",
    "documents_router",
    "health_router",
    "judge_router",
    "threads_router",
]
