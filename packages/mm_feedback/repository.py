import logging
from typing import List, Optional

from packages.mm_core.errors import PermissionDeniedError, PersistenceError
from packages.mm_core.time import utc_now_iso
from packages.mm_store.base import DocumentStore

from .schema import Feedback, FeedbackAssessment

logger = logging.getLogger("mockmate.feedback")

COLLECTION = "feedback"


class FeedbackRepository:
    """
    Feedback persistence on top of the document store.
    Writes are single-document upserts; last writer wins.
    """
    def __init__(self, store: DocumentStore):
        self.store = store

    def ensure_writable(self, feedback_id: Optional[str], interview_id: str, user_id: str) -> None:
        """
        A retake may only overwrite feedback of the same interview and user.
        Raises PermissionDeniedError otherwise; an unknown id is free to take.
        """
        if feedback_id is None:
            return
        existing = self.store.get(COLLECTION, feedback_id)
        if existing is None:
            return
        if existing.get("userId") != user_id or existing.get("interviewId") != interview_id:
            raise PermissionDeniedError(
                f"Feedback {feedback_id} belongs to another interview or user",
                details={"feedback_id": feedback_id},
            )

    def save(
        self,
        interview_id: str,
        user_id: str,
        assessment: FeedbackAssessment,
        feedback_id: Optional[str] = None,
    ) -> str:
        """
        Upsert under `feedback_id` (retake: overwrite in place) or a new id.
        createdAt is stamped here, at persistence time.
        """
        self.ensure_writable(feedback_id, interview_id, user_id)

        record = Feedback(
            interview_id=interview_id,
            user_id=user_id,
            total_score=assessment.total_score,
            category_scores=assessment.category_scores,
            strengths=assessment.strengths,
            areas_for_improvement=assessment.areas_for_improvement,
            final_assessment=assessment.final_assessment,
            created_at=utc_now_iso(),
        )

        try:
            doc_id = feedback_id if feedback_id is not None else self.store.new_id(COLLECTION)
            self.store.set(COLLECTION, doc_id, record.to_document())
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save feedback for interview {interview_id}: {e}") from e

        logger.info(f"Feedback {doc_id} saved for interview {interview_id}")
        return doc_id

    def get(self, feedback_id: str) -> Optional[Feedback]:
        doc = self.store.get(COLLECTION, feedback_id)
        return Feedback.model_validate(doc) if doc else None

    def get_by_interview(self, interview_id: str, user_id: str) -> Optional[Feedback]:
        docs = self.store.query(
            COLLECTION,
            filters=[("interviewId", "==", interview_id), ("userId", "==", user_id)],
            limit=1,
        )
        return Feedback.model_validate(docs[0]) if docs else None

    def list_by_user(self, user_id: str) -> List[Feedback]:
        docs = self.store.query(
            COLLECTION,
            filters=[("userId", "==", user_id)],
            order_by="createdAt",
            descending=True,
        )
        return [Feedback.model_validate(d) for d in docs]
