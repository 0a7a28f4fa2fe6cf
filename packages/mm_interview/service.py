import json
import logging
from typing import Any, Dict, List, Optional

from packages.mm_auth.resolver import User
from packages.mm_core.errors import GenerationError, NotFoundError, ValidationError
from packages.mm_core.time import utc_now_iso
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_providers.question.base import QuestionGenerator
from packages.mm_store.base import DocumentStore

from .models import DEFAULT_COVER, Interview, InterviewHistoryItem, random_cover, split_techstack

logger = logging.getLogger("mockmate.interview")

COLLECTION = "interviews"


def parse_questions(raw: str) -> List[str]:
    """
    Parse the model's question list.
    Tolerates ```json fences and a wrapping pair of quotes; anything else must be a JSON array of strings.
    """
    text = (raw or "").strip()
    text = text.replace("```json", "").replace("```", "").strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parsing failed. Raw output: {raw[:200]!r}")
        raise GenerationError("Invalid JSON returned from AI model.") from e

    if not isinstance(parsed, list) or not all(isinstance(q, str) for q in parsed):
        raise GenerationError("Question output must be a JSON array of strings")
    return [q.strip() for q in parsed if q.strip()]


class InterviewService:
    """
    Interview catalogue: generation, persistence and listing.
    """
    def __init__(
        self,
        store: DocumentStore,
        question_generator: QuestionGenerator,
        feedback_repo: FeedbackRepository,
    ):
        self.store = store
        self.question_generator = question_generator
        self.feedback_repo = feedback_repo

    async def generate(
        self,
        user_id: str,
        role: str,
        level: str,
        techstack: Any,
        type: str,
        amount: int,
    ) -> Interview:
        """Generate questions for a role and persist them as a finalized interview."""
        if not role or not level:
            raise ValidationError("role and level are required")
        if amount <= 0:
            raise ValidationError("amount must be positive")

        techstack_list = split_techstack(techstack)
        result = await self.question_generator.generate_questions({
            "role": role,
            "level": level,
            "techstack": ", ".join(techstack_list),
            "type": type,
            "amount": amount,
        })
        if not result.success:
            raise GenerationError(result.error or "Question generation failed")

        interview = Interview(
            role=role,
            level=level,
            type=type,
            techstack=techstack_list,
            questions=parse_questions(result.content),
            user_id=user_id,
            finalized=True,
            cover_image=random_cover(),
            created_at=utc_now_iso(),
        )
        interview.id = self.store.add(COLLECTION, interview.to_document())
        logger.info(f"Generated interview {interview.id} with {len(interview.questions)} questions")
        return interview

    def save(self, user: User, payload: Dict[str, Any]) -> Interview:
        """Upsert an interview for the current user, filling defaults for missing fields."""
        interview_id = payload.get("id") or self.store.new_id(COLLECTION)
        interview = Interview(
            id=interview_id,
            user_id=user.id,
            role=payload.get("role") or "Unknown",
            level=payload.get("level") or "Unknown",
            type=payload.get("type") or "generate",
            techstack=payload.get("techstack") or [],
            questions=payload.get("questions") or [],
            cover_image=payload.get("coverImage") or DEFAULT_COVER,
            finalized=True,
            created_at=utc_now_iso(),
        )
        self.store.set(COLLECTION, interview_id, interview.to_document())
        return interview

    def get(self, interview_id: str) -> Interview:
        doc = self.store.get(COLLECTION, interview_id)
        if doc is None:
            raise NotFoundError(f"Interview {interview_id} not found")
        return Interview.model_validate(doc)

    def list_by_user(self, user_id: str) -> List[Interview]:
        if not user_id:
            return []
        docs = self.store.query(
            COLLECTION,
            filters=[("userId", "==", user_id)],
            order_by="createdAt",
            descending=True,
        )
        return [Interview.model_validate(d) for d in docs]

    def list_latest(self, user_id: str, limit: int = 20) -> List[Interview]:
        """Newest finalized interviews by other users (the limit applies before the user filter)."""
        docs = self.store.query(
            COLLECTION,
            filters=[("finalized", "==", True)],
            order_by="createdAt",
            descending=True,
            limit=limit,
        )
        return [Interview.model_validate(d) for d in docs if d.get("userId") != user_id]

    def history(self, user_id: str) -> List[InterviewHistoryItem]:
        return [
            InterviewHistoryItem(
                interview=interview,
                feedback=self.feedback_repo.get_by_interview(interview.id, user_id),
            )
            for interview in self.list_by_user(user_id)
        ]
