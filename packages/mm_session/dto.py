from typing import Any, Dict, List, Optional, Union

from pydantic import Field, field_validator, model_validator

from packages.mm_core.dto import BaseDTO
from packages.mm_transcript.dto import Turn

from .state import FinishTrigger, SessionMode, SessionStatus


class CallConfig(BaseDTO):
    """
    Configuration for starting a call.
    Interview mode carries the interview context surfaced to the assistant.
    """
    user_name: str = Field(..., description="Participant display name")
    user_id: str = Field(..., description="Participant id")
    mode: SessionMode = Field(..., description="generate or interview")

    interview_id: Optional[str] = Field(default=None, description="Required for interview mode")
    feedback_id: Optional[str] = Field(default=None, description="Existing feedback to overwrite on retake")

    role: Optional[str] = None
    level: Optional[str] = None
    type: Optional[str] = None
    techstack: List[str] = Field(default_factory=list)
    amount: int = Field(default=0, ge=0)
    questions: List[str] = Field(default_factory=list)

    @field_validator("techstack", mode="before")
    @classmethod
    def split_techstack(cls, v: Union[str, List[str], None]):
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @model_validator(mode="after")
    def require_interview_id(self) -> "CallConfig":
        if self.mode == SessionMode.INTERVIEW and not self.interview_id:
            raise ValueError("interview_id is required for interview mode")
        return self

    def to_variable_values(self) -> Dict[str, Any]:
        """Variables handed to the voice workflow."""
        values: Dict[str, Any] = {
            "username": self.user_name,
            "userid": self.user_id,
            "role": self.role or "",
            "type": self.type or self.mode.value,
            "level": self.level or "",
            "techstack": ", ".join(self.techstack),
            "amount": self.amount,
        }
        # questions only when the interview already has them
        if self.mode == SessionMode.INTERVIEW and self.questions:
            values["questions"] = "\n".join(f"- {q}" for q in self.questions)
        return values


class SessionContext(BaseDTO):
    """
    Runtime context of one call session (in-memory only).
    """
    session_id: str
    status: SessionStatus = SessionStatus.IDLE
    mode: Optional[SessionMode] = None
    is_counterpart_speaking: bool = False
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    finish_trigger: Optional[FinishTrigger] = None
    redirect: Optional[str] = None
    feedback_id: Optional[str] = None
    last_error: Optional[str] = None


class SessionState(BaseDTO):
    """
    Observable snapshot for the view layer.
    """
    session_id: str
    status: SessionStatus
    mode: Optional[SessionMode] = None
    turns: List[Turn] = Field(default_factory=list)
    latest_turn: Optional[Turn] = None
    is_counterpart_speaking: bool = False
    redirect: Optional[str] = None
    feedback_id: Optional[str] = None
    last_error: Optional[str] = None
