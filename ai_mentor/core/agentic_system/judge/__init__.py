"""Task judge: prompt, verdict schema and LLM backend."""

from ai_mentor.core.agentic_system.judge.judge_schema import JudgeVerdict
from ai_mentor.core.agentic_system.judge.task_judge import TaskJudge

__all__ = ["JudgeVerdict", "TaskJudge"]
