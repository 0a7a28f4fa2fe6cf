from abc import ABC, abstractmethod
from typing import Any, Dict, List


class IScoringProvider(ABC):
    @abstractmethod
    async def score(self, rendered_transcript: str, rubric: List[str]) -> Dict[str, Any]:
        """
        Score an interview transcript against the rubric.
        Args:
            rendered_transcript: "<speaker>: <text>" lines, in conversation order
            rubric: category names, in the order they must be reported
        Returns:
            Raw structured output (validated by the caller)
        Raises:
            ScoringError on backend failure or unparseable output
        """
        pass
