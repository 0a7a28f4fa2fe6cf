from datetime import datetime
from typing import List, Optional

from pydantic import Field

from packages.mm_core.dto import BaseDTO, DocumentModel

STATUS_SCHEDULED = "scheduled"


class ScheduledSession(DocumentModel):
    """
    A planned practice session (collection `scheduled_interviews`).
    `status` is written once at creation; upcoming/past is derived at read time.
    """
    id: Optional[str] = None
    user_id: str
    interview_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    notes: Optional[str] = None
    scheduled_at: datetime
    status: str = STATUS_SCHEDULED
    created_at: Optional[datetime] = None


class ScheduleBuckets(BaseDTO):
    upcoming: List[ScheduledSession] = Field(default_factory=list)
    past: List[ScheduledSession] = Field(default_factory=list)
