import asyncio
from typing import Any, Dict, List, Optional

from packages.mm_core.errors import ScoringError

from .base import IScoringProvider


class MockScoringProvider(IScoringProvider):
    """
    Deterministic scorer for local runs without an API key.
    Records every call so callers can inspect what was scored.
    """
    def __init__(self, latency_ms: int = 0, response: Optional[Dict[str, Any]] = None, fail: bool = False):
        self.latency_ms = latency_ms
        self.response = response
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def score(self, rendered_transcript: str, rubric: List[str]) -> Dict[str, Any]:
        self.calls.append({"transcript": rendered_transcript, "rubric": list(rubric)})
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)
        if self.fail:
            raise ScoringError("Mock scorer configured to fail")
        if self.response is not None:
            return self.response

        return {
            "totalScore": 70,
            "categoryScores": [
                {"name": name, "score": 70, "comment": "Mock assessment."} for name in rubric
            ],
            "strengths": ["Clear introduction"],
            "areasForImprovement": ["Give more concrete examples"],
            "finalAssessment": "This is a mock assessment based on the transcript.",
        }
