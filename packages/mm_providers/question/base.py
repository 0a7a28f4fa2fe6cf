from abc import ABC, abstractmethod
from typing import Optional, Dict, Any


class QuestionGenerationResult:
    def __init__(self, content: str, metadata: Dict[str, Any], success: bool, error: Optional[str] = None):
        self.content = content
        self.metadata = metadata
        self.success = success
        self.error = error


class QuestionGenerator(ABC):
    @abstractmethod
    async def generate_questions(self, context: Dict[str, Any]) -> QuestionGenerationResult:
        """
        Generate interview questions as raw model text (expected: a JSON array of strings).
        Context keys: role, level, techstack, type, amount.
        Must return success=False on failure, never raise exception.
        """
        pass
