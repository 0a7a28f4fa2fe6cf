from enum import Enum

from pydantic import ConfigDict, Field

from packages.mm_core.dto import BaseDTO


class Speaker(str, Enum):
    """
    Who produced a turn.
    The voice transport reports the candidate as "user"; it is normalized to CANDIDATE.
    """
    CANDIDATE = "candidate"
    SYSTEM = "system"
    ASSISTANT = "assistant"

    @classmethod
    def parse(cls, value: str) -> "Speaker":
        raw = (value or "").strip().lower()
        if raw == "user":
            return cls.CANDIDATE
        return cls(raw)


class Turn(BaseDTO):
    """One attributed utterance. Frozen once recorded."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=False)

    speaker: Speaker = Field(..., description="candidate, system or assistant")
    text: str = Field(..., description="Final transcript text, kept verbatim")

    def render(self) -> str:
        return f"{self.speaker.value}: {self.text}"
