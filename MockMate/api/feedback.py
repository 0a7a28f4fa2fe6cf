import logging

from fastapi import APIRouter, Depends

from MockMate.api.dependencies import get_current_user, get_feedback_pipeline, get_feedback_repository
from MockMate.api.schemas import FeedbackCreateRequest
from packages.mm_auth.resolver import User
from packages.mm_core.errors import NotFoundError, ValidationError
from packages.mm_feedback.pipeline import FeedbackPipeline, SynthesisResult
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_feedback.schema import Feedback

logger = logging.getLogger("mockmate.api.feedback")

router = APIRouter(tags=["Feedback"])


@router.post("/feedback", response_model=SynthesisResult)
async def create_feedback(
    request: FeedbackCreateRequest,
    user: User = Depends(get_current_user),
    pipeline: FeedbackPipeline = Depends(get_feedback_pipeline),
):
    """
    Score a finished transcript and persist the feedback.
    Scoring or persistence failures come back as success=false, never as an error status.
    """
    try:
        turns = [entry.to_turn() for entry in request.transcript]
    except ValueError as e:
        raise ValidationError(str(e)) from e

    return await pipeline.synthesize_feedback(
        interview_id=request.interview_id,
        user_id=user.id,
        transcript=turns,
        feedback_id=request.feedback_id,
    )


@router.get("/interviews/{interview_id}/feedback", response_model=Feedback)
def get_interview_feedback(
    interview_id: str,
    user: User = Depends(get_current_user),
    repository: FeedbackRepository = Depends(get_feedback_repository),
):
    feedback = repository.get_by_interview(interview_id, user.id)
    if feedback is None:
        raise NotFoundError(f"No feedback for interview {interview_id}")
    return feedback
