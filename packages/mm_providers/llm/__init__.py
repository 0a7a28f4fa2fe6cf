from .base import IScoringProvider
from .mock import MockScoringProvider
from .openai_impl import OpenAIScoringProvider

__all__ = ["IScoringProvider", "MockScoringProvider", "OpenAIScoringProvider"]
