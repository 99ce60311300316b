"""
Judge API schemas.

Dependencies: pydantic
System role: Judge API contracts
"""

from uuid import UUID

from ai_mentor.boundary.db.models.thread_model import ThreadStatus
from ai_mentor.models.common import CamelModel


class JudgeResponse(CamelModel):
    """Verdict of a judged thread."""

    thread_id: UUID
    summary: str
    score: int
    min_score: int
    max_score: int
    passed: bool
    percentage: int
    status: ThreadStatus

    @classmethod
    def from_outcome(cls, outcome) -> "JudgeResponse":
        verdict = outcome.verdict
        return cls(
            thread_id=outcome.thread_id,
            summary=verdict.summary,
            score=verdict.score,
            min_score=verdict.min_score,
            max_score=verdict.max_score,
            passed=verdict.passed,
            percentage=verdict.percentage,
            status=outcome.status,
        )
