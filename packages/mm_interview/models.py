import random
from typing import List, Optional

from pydantic import Field, field_validator

from packages.mm_core.dto import BaseDTO, DocumentModel
from packages.mm_feedback.schema import Feedback

DEFAULT_COVER = "/covers/default.png"

INTERVIEW_COVERS = [
    "/covers/adobe.png",
    "/covers/amazon.png",
    "/covers/facebook.png",
    "/covers/hostinger.png",
    "/covers/pinterest.png",
    "/covers/quora.png",
    "/covers/reddit.png",
    "/covers/skype.png",
    "/covers/spotify.png",
    "/covers/telegram.png",
    "/covers/tiktok.png",
    "/covers/yahoo.png",
]


def random_cover() -> str:
    return random.choice(INTERVIEW_COVERS)


def split_techstack(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    return list(value)


class Interview(DocumentModel):
    """
    Persisted interview (collection `interviews`).
    Owned by its creator; not edited once finalized.
    """
    id: Optional[str] = None
    role: str = "Unknown"
    level: str = "Unknown"
    type: str = "generate"
    techstack: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    user_id: str
    finalized: bool = True
    cover_image: str = DEFAULT_COVER
    created_at: Optional[str] = None

    @field_validator("techstack", mode="before")
    @classmethod
    def _split_techstack(cls, v):
        return split_techstack(v)


class InterviewHistoryItem(BaseDTO):
    """An interview of the user paired with its feedback, if any."""
    interview: Interview
    feedback: Optional[Feedback] = None
