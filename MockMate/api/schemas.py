from datetime import datetime
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from packages.mm_session.state import SessionMode
from packages.mm_transcript.dto import Speaker, Turn


class SessionCreateRequest(BaseModel):
    """
    Start a call. For interview mode, missing role/level/techstack/questions
    are filled from the stored interview.
    """
    mode: SessionMode = Field(..., description="generate or interview")
    user_name: Optional[str] = Field(None, description="Defaults to the current user's name")
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    role: Optional[str] = None
    level: Optional[str] = None
    type: Optional[str] = None
    techstack: Union[List[str], str, None] = None
    amount: int = Field(default=0, ge=0)
    questions: Optional[List[str]] = None


class UserTurnRequest(BaseModel):
    text: str = Field(..., min_length=1)


class TranscriptEntry(BaseModel):
    """Accepts both {role, content} (voice SDK shape) and {speaker, text}."""
    speaker: str = Field(..., validation_alias=AliasChoices("speaker", "role"))
    text: str = Field(..., validation_alias=AliasChoices("text", "content"))

    def to_turn(self) -> Turn:
        return Turn(speaker=Speaker.parse(self.speaker), text=self.text)


class FeedbackCreateRequest(BaseModel):
    interview_id: str = Field(..., validation_alias=AliasChoices("interview_id", "interviewId"))
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    feedback_id: Optional[str] = Field(None, validation_alias=AliasChoices("feedback_id", "feedbackId"))


class GenerateInterviewRequest(BaseModel):
    """Body posted by the voice workflow's generate step."""
    type: str = "mixed"
    role: str
    level: str
    techstack: Union[List[str], str, None] = None
    amount: int = Field(default=5, gt=0, le=50)
    userid: str


class InterviewSaveRequest(BaseModel):
    id: Optional[str] = None
    role: Optional[str] = None
    level: Optional[str] = None
    type: Optional[str] = None
    techstack: Union[List[str], str, None] = None
    questions: Optional[List[str]] = None
    cover_image: Optional[str] = Field(None, validation_alias=AliasChoices("cover_image", "coverImage"))


class GenerateInterviewResponse(BaseModel):
    success: bool
    interview_id: str = Field(..., serialization_alias="interviewId")
    questions: List[str]


class ScheduleCreateRequest(BaseModel):
    title: Optional[str] = None
    scheduled_at: Optional[Union[datetime, str]] = Field(None, validation_alias=AliasChoices("scheduled_at", "scheduledAt"))
    interview_id: Optional[str] = Field(None, validation_alias=AliasChoices("interview_id", "interviewId"))
    notes: Optional[str] = None
