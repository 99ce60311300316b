"""
Judge API endpoint.

Routes: POST /ai/judge/{thread_id}

Dependencies: ai_mentor.application.services.judge_service
System role: Task evaluation HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from ai_mentor.api.deps import CurrentUser, get_current_user, get_judge_service
from ai_mentor.api.error_handling import handle_mentor_errors
from ai_mentor.application.services import JudgeService
from ai_mentor.models.judge import JudgeResponse

router = APIRouter(prefix="/ai", tags=["judge"])


@router.post("/judge/{thread_id}", response_model=JudgeResponse)
@handle_mentor_errors
async def judge_thread(
    thread_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    judge_service: JudgeService = Depends(get_judge_service),
) -> JudgeResponse:
    """
    Evaluate the student's work in a thread and complete it.

    Raises:
        HTTPException(400): Thread has no student messages
        HTTPException(409): Thread already completed
        HTTPException(500): Judge model failure
    """
    outcome = await judge_service.run_judge(thread_id, user.id)
    return JudgeResponse.from_outcome(outcome)
