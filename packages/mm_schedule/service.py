import logging
from datetime import datetime
from typing import List, Optional, Union

from packages.mm_auth.resolver import User
from packages.mm_core.errors import NotFoundError, PermissionDeniedError, ValidationError
from packages.mm_core.time import parse_timestamp, utc_now
from packages.mm_store.base import DocumentStore

from .gate import classify_schedule
from .models import STATUS_SCHEDULED, ScheduleBuckets, ScheduledSession

logger = logging.getLogger("mockmate.schedule")

COLLECTION = "scheduled_interviews"


class ScheduleService:
    """
    Create, list and cancel scheduled practice sessions.
    No overlap validation: two sessions may share the same time slot.
    """
    def __init__(self, store: DocumentStore):
        self.store = store

    def create(
        self,
        user: User,
        title: Optional[str],
        scheduled_at: Union[str, datetime, None],
        interview_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ScheduledSession:
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")
        if scheduled_at is None or (isinstance(scheduled_at, str) and not scheduled_at.strip()):
            raise ValidationError("scheduledAt is required")
        try:
            when = parse_timestamp(scheduled_at)
        except ValueError as e:
            raise ValidationError(f"scheduledAt is not a valid timestamp: {scheduled_at}") from e

        session = ScheduledSession(
            user_id=user.id,
            interview_id=interview_id or None,
            title=title,
            notes=(notes or "").strip() or None,
            scheduled_at=when,
            status=STATUS_SCHEDULED,
            created_at=utc_now(),
        )
        session.id = self.store.add(COLLECTION, session.to_document())
        logger.info(f"Scheduled session {session.id} for user {user.id} at {when.isoformat()}")
        return session

    def list_for_user(self, user_id: str) -> List[ScheduledSession]:
        docs = self.store.query(
            COLLECTION,
            filters=[("userId", "==", user_id)],
            order_by="scheduledAt",
        )
        return [ScheduledSession.model_validate(d) for d in docs]

    def overview(self, user_id: str, now: Optional[datetime] = None) -> ScheduleBuckets:
        """The user's sessions split into upcoming/past, recomputed on every call."""
        return classify_schedule(now or utc_now(), self.list_for_user(user_id))

    def cancel(self, user: User, session_id: str) -> None:
        """Delete a scheduled session. Only its owner may cancel it."""
        doc = self.store.get(COLLECTION, session_id)
        if doc is None:
            raise NotFoundError(f"Scheduled session {session_id} not found")
        if doc.get("userId") != user.id:
            raise PermissionDeniedError(f"Scheduled session {session_id} belongs to another user")
        self.store.delete(COLLECTION, session_id)
        logger.info(f"Cancelled scheduled session {session_id}")
