from enum import Enum


class SessionStatus(str, Enum):
    """
    Call Session Status.
    IDLE -> CONNECTING -> ACTIVE -> FINISHED; FINISHED is terminal for the instance.
    """
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class SessionMode(str, Enum):
    """
    GENERATE sessions produce new interview content and never synthesize feedback.
    INTERVIEW sessions always do.
    """
    GENERATE = "generate"
    INTERVIEW = "interview"


class FinishTrigger(str, Enum):
    """What moved the session into FINISHED."""
    CALL_ENDED = "CALL_ENDED"
    USER_DISCONNECT = "USER_DISCONNECT"


HOME_ROUTE = "/"


def feedback_route(interview_id: str) -> str:
    return f"/interview/{interview_id}/feedback"
