import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from packages.mm_core.dto import BaseDTO
from packages.mm_core.errors import PermissionDeniedError, PersistenceError, ScoringError
from packages.mm_providers.llm.base import IScoringProvider
from packages.mm_transcript.dto import Turn

from .formatter import render_transcript
from .repository import FeedbackRepository
from .rubric import RUBRIC
from .schema import validate_assessment

logger = logging.getLogger("mockmate.feedback")


class SynthesisResult(BaseDTO):
    success: bool
    feedback_id: Optional[str] = None


class FeedbackPipeline:
    """
    Transcript -> validated, persisted feedback.

    Steps: format, score, validate, persist. A failure in any of the last three,
    or a retake id owned by another interview or user, yields success=False and
    leaves the store untouched.
    """
    def __init__(
        self,
        scorer: IScoringProvider,
        repository: FeedbackRepository,
        rubric: Tuple[str, ...] = RUBRIC,
    ):
        self.scorer = scorer
        self.repository = repository
        self.rubric = rubric

    async def synthesize_feedback(
        self,
        interview_id: str,
        user_id: str,
        transcript: Sequence[Turn],
        feedback_id: Optional[str] = None,
    ) -> SynthesisResult:
        rendered = render_transcript(transcript)
        logger.info(
            f"Synthesizing feedback for interview {interview_id} "
            f"({len(transcript)} turns, retake={feedback_id is not None})"
        )

        try:
            self.repository.ensure_writable(feedback_id, interview_id, user_id)
            raw = await self._invoke_scorer(rendered)
            assessment = validate_assessment(raw, self.rubric)
            saved_id = self.repository.save(interview_id, user_id, assessment, feedback_id)
        except ScoringError as e:
            logger.error(f"Scoring failed for interview {interview_id}: {e}")
            return SynthesisResult(success=False)
        except PersistenceError as e:
            logger.error(f"Persisting feedback failed for interview {interview_id}: {e}")
            return SynthesisResult(success=False)
        except PermissionDeniedError as e:
            logger.warning(f"Refusing feedback write for interview {interview_id}: {e}")
            return SynthesisResult(success=False)

        return SynthesisResult(success=True, feedback_id=saved_id)

    async def _invoke_scorer(self, rendered: str) -> Dict[str, Any]:
        try:
            return await self.scorer.score(rendered, list(self.rubric))
        except ScoringError:
            raise
        except Exception as e:
            raise ScoringError(f"Scoring function raised {type(e).__name__}: {e}") from e
