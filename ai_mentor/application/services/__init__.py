"""Per-request services of the mentor pipeline."""

from ai_mentor.application.services.chat_service import ChatService
from ai_mentor.application.services.document_service import DocumentService
from ai_mentor.application.services.judge_service import JudgeOutcome, JudgeService
from ai_mentor.application.services.prompt_builder import PromptBuilder
from ai_mentor.application.services.retrieval_service import RetrievalService
from ai_mentor.application.services.streaming_service import MentorStream, StreamingService
from ai_mentor.application.services.summarization_service import SummarizationService
from ai_mentor.application.services.thread_service import ThreadService
from ai_mentor.application.services.turn_pipeline import TurnResult

__all__ = [
    "ChatService",
    "DocumentService",
    "JudgeOutcome",
    "JudgeService",
    "MentorStream",
    "PromptBuilder",
    "RetrievalService",
    "StreamingService",
    "SummarizationService",
    "ThreadService",
    "TurnResult",
]
