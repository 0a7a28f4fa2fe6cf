from .formatter import render_transcript
from .pipeline import FeedbackPipeline, SynthesisResult
from .repository import FeedbackRepository
from .rubric import RUBRIC
from .schema import CategoryScore, Feedback, FeedbackAssessment, validate_assessment

__all__ = [
    "render_transcript",
    "FeedbackPipeline",
    "SynthesisResult",
    "FeedbackRepository",
    "RUBRIC",
    "CategoryScore",
    "Feedback",
    "FeedbackAssessment",
    "validate_assessment",
]
