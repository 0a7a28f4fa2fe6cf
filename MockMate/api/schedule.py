from fastapi import APIRouter, Depends, Response, status

from MockMate.api.dependencies import get_current_user, get_schedule_service
from MockMate.api.schemas import ScheduleCreateRequest
from packages.mm_auth.resolver import User
from packages.mm_schedule.models import ScheduleBuckets, ScheduledSession
from packages.mm_schedule.service import ScheduleService

router = APIRouter(prefix="/schedule", tags=["Schedule"])


@router.get("", response_model=ScheduleBuckets)
def get_schedule(
    user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    """The current user's sessions, split into upcoming and past at request time."""
    return service.overview(user.id)


@router.post("", response_model=ScheduledSession, status_code=status.HTTP_201_CREATED)
def create_scheduled_session(
    request: ScheduleCreateRequest,
    user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.create(
        user,
        title=request.title,
        scheduled_at=request.scheduled_at,
        interview_id=request.interview_id,
        notes=request.notes,
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_scheduled_session(
    session_id: str,
    user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    service.cancel(user, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
