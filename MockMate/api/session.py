from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response, status

from MockMate.api.dependencies import (
    get_current_user,
    get_interview_service,
    get_session_service,
    verify_vapi_secret,
)
from MockMate.api.schemas import SessionCreateRequest, UserTurnRequest
from packages.mm_auth.resolver import User
from packages.mm_core.errors import ValidationError
from packages.mm_interview.service import InterviewService
from packages.mm_providers.voice.base import VoiceEvent
from packages.mm_providers.voice.vapi_impl import parse_server_message
from packages.mm_service.session_service import SessionService
from packages.mm_session.dto import CallConfig, SessionState
from packages.mm_session.state import SessionMode

router = APIRouter(prefix="/sessions", tags=["Session"])


@router.post("", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: SessionCreateRequest,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
    interviews: InterviewService = Depends(get_interview_service),
):
    """
    Start a voice call for the current user.
    Interview mode fills the call context from the stored interview.
    """
    values: Dict[str, Any] = request.model_dump(exclude_none=True)
    values.setdefault("user_name", user.name or user.id)

    if request.mode == SessionMode.INTERVIEW:
        if not request.interview_id:
            raise ValidationError("interview_id is required for interview mode")
        interview = interviews.get(request.interview_id)
        values.setdefault("role", interview.role)
        values.setdefault("level", interview.level)
        values.setdefault("type", interview.type)
        values.setdefault("techstack", interview.techstack)
        values.setdefault("questions", interview.questions)
        if not values.get("amount"):
            values["amount"] = len(interview.questions)

    try:
        config = CallConfig(user_id=user.id, **values)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return await service.start_session(config)


@router.get("/{session_id}", response_model=SessionState)
def get_session(
    session_id: str,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.get_session(session_id, user.id)


@router.post("/{session_id}/events", response_model=SessionState)
async def push_event(
    session_id: str,
    event: VoiceEvent,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    """Deliver a normalized transport event to one of the current user's sessions."""
    return await service.handle_event(session_id, event, user.id)


@router.post("/{session_id}/vapi", dependencies=[Depends(verify_vapi_secret)])
async def vapi_webhook(
    session_id: str,
    payload: Dict[str, Any] = Body(...),
    service: SessionService = Depends(get_session_service),
):
    """
    Server URL for the Vapi call of this session.
    Authenticated by the shared secret header. Untracked message types are
    acknowledged and ignored.
    """
    event = parse_server_message(payload)
    if event is None:
        return {"handled": False}
    state = await service.handle_event(session_id, event)
    return {"handled": True, "status": state.status}


@router.post("/{session_id}/messages", response_model=SessionState)
async def send_user_turn(
    session_id: str,
    request: UserTurnRequest,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return await service.inject_user_turn(session_id, request.text, user.id)


@router.post("/{session_id}/disconnect", response_model=SessionState)
async def disconnect_session(
    session_id: str,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    """User-initiated hang up. Idempotent once the session is FINISHED."""
    return await service.disconnect_session(session_id, user.id)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def end_session(
    session_id: str,
    user: User = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    service.end_session(session_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
