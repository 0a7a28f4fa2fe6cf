import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field, StrictInt, StrictStr
from pydantic import ValidationError as SchemaValidationError

from packages.mm_core.dto import DocumentModel
from packages.mm_core.errors import ScoringError

from .rubric import RUBRIC, SCORE_MAX, SCORE_MIN, canonical_category

logger = logging.getLogger("mockmate.feedback")


class CategoryScore(DocumentModel):
    """
    Score and comment for a single rubric category.
    """
    name: StrictStr = Field(..., min_length=1, description="Rubric category name")
    score: StrictInt = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Score 0-100")
    comment: StrictStr = Field(..., description="Reasoning for the score")


class FeedbackAssessment(DocumentModel):
    """
    Structured output expected from the scoring function.
    Strict: strings are not coerced to numbers and no field may be missing.
    """
    total_score: StrictInt = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Overall score, independent of category scores")
    category_scores: List[CategoryScore] = Field(..., description="One entry per rubric category, rubric order")
    strengths: List[StrictStr] = Field(...)
    areas_for_improvement: List[StrictStr] = Field(...)
    final_assessment: StrictStr = Field(..., min_length=1)


class Feedback(DocumentModel):
    """
    Persisted feedback record (collection `feedback`).
    At most one per (interview_id, user_id) under normal operation; keyed by feedback id.
    """
    id: Optional[str] = None
    interview_id: str
    user_id: str
    total_score: int
    category_scores: List[CategoryScore]
    strengths: List[str]
    areas_for_improvement: List[str]
    final_assessment: str
    created_at: str


def validate_assessment(raw: Any, rubric: Tuple[str, ...] = RUBRIC) -> FeedbackAssessment:
    """
    Check raw scoring output against the schema and the rubric.
    Category names are matched case/spacing-insensitively and returned canonical, in rubric order.
    Raises ScoringError on any mismatch.
    """
    if not isinstance(raw, dict):
        raise ScoringError(f"Scoring output must be an object, got {type(raw).__name__}")

    try:
        assessment = FeedbackAssessment.model_validate(raw)
    except SchemaValidationError as e:
        raise ScoringError(
            "Scoring output does not match the feedback schema",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    by_category: Dict[str, CategoryScore] = {}
    for item in assessment.category_scores:
        category = canonical_category(item.name, rubric)
        if category is None:
            raise ScoringError(f"Unknown rubric category: {item.name}")
        if category in by_category:
            raise ScoringError(f"Duplicate rubric category: {category}")
        by_category[category] = item

    missing = [c for c in rubric if c not in by_category]
    if missing:
        raise ScoringError(f"Missing rubric categories: {', '.join(missing)}")

    ordered = [
        CategoryScore(name=c, score=by_category[c].score, comment=by_category[c].comment)
        for c in rubric
    ]

    mean = sum(c.score for c in ordered) / len(ordered)
    if abs(mean - assessment.total_score) > 10:
        logger.debug(f"totalScore {assessment.total_score} deviates from category mean {mean:.1f}")

    return assessment.model_copy(update={"category_scores": ordered})
