from typing import List

from fastapi import APIRouter, Depends, status

from MockMate.api.dependencies import get_current_user, get_interview_service
from MockMate.api.schemas import GenerateInterviewRequest, GenerateInterviewResponse, InterviewSaveRequest
from packages.mm_auth.resolver import User
from packages.mm_interview.models import Interview, InterviewHistoryItem
from packages.mm_interview.service import InterviewService

router = APIRouter(prefix="/interviews", tags=["Interview"])


@router.post("/generate", response_model=GenerateInterviewResponse)
async def generate_interview(
    request: GenerateInterviewRequest,
    service: InterviewService = Depends(get_interview_service),
):
    """
    Called by the voice workflow once the candidate has described the role.
    The workflow identifies the user through `userid`.
    """
    interview = await service.generate(
        user_id=request.userid,
        role=request.role,
        level=request.level,
        techstack=request.techstack,
        type=request.type,
        amount=request.amount,
    )
    return GenerateInterviewResponse(success=True, interview_id=interview.id, questions=interview.questions)


@router.post("", response_model=Interview, status_code=status.HTTP_201_CREATED)
def save_interview(
    request: InterviewSaveRequest,
    user: User = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    payload = request.model_dump(exclude_none=True)
    if "cover_image" in payload:
        payload["coverImage"] = payload.pop("cover_image")
    return service.save(user, payload)


@router.get("", response_model=List[Interview])
def list_my_interviews(
    user: User = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    return service.list_by_user(user.id)


# fixed paths must be declared before /{interview_id}
@router.get("/latest", response_model=List[Interview])
def list_latest_interviews(
    limit: int = 20,
    user: User = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    return service.list_latest(user.id, limit=limit)


@router.get("/history", response_model=List[InterviewHistoryItem])
def interview_history(
    user: User = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    return service.history(user.id)


@router.get("/{interview_id}", response_model=Interview)
def get_interview(
    interview_id: str,
    user: User = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    return service.get(interview_id)
