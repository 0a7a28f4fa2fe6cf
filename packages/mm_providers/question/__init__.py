from .base import QuestionGenerator, QuestionGenerationResult
from .mock import MockQuestionGenerator
from .openai_impl import OpenAIQuestionGenerator

__all__ = [
    "QuestionGenerator",
    "QuestionGenerationResult",
    "MockQuestionGenerator",
    "OpenAIQuestionGenerator",
]
