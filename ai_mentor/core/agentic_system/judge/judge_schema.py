"""
Task judge schemas.

Dependencies: pydantic
System role: Verdict contract between the judge backend and the judge service
"""

from pydantic import BaseModel, Field, computed_field


class JudgeVerdict(BaseModel):
    """Clamped scores and feedback for one thread."""

    summary: str = Field(default="", description="Feedback for the student")
    min_score: int = Field(default=0, ge=0, description="Criteria required to pass")
    score: int = Field(default=0, ge=0, description="Criteria met")
    max_score: int = Field(default=0, ge=0, description="Criteria in the conditions")

    @computed_field
    @property
    def passed(self) -> bool:
        return self.score >= self.min_score

    @computed_field
    @property
    def percentage(self) -> int:
        if self.max_score == 0:
            return 0
        return round(self.score * 100 / self.max_score)
