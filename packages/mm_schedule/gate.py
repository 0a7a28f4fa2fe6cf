from datetime import datetime
from enum import Enum
from typing import Iterable

from packages.mm_core.time import parse_timestamp

from .models import ScheduleBuckets, ScheduledSession


class ScheduleClass(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"


def classify(now: datetime, scheduled_at: datetime) -> ScheduleClass:
    """Upcoming when scheduled_at >= now (equality counts as upcoming), else past."""
    if parse_timestamp(scheduled_at) >= parse_timestamp(now):
        return ScheduleClass.UPCOMING
    return ScheduleClass.PAST


def classify_schedule(now: datetime, sessions: Iterable[ScheduledSession]) -> ScheduleBuckets:
    """
    Partition sessions relative to `now`, preserving input order in each bucket.
    Pure: nothing is written back, callers recompute on every read.
    """
    buckets = ScheduleBuckets()
    for session in sessions:
        if classify(now, session.scheduled_at) == ScheduleClass.UPCOMING:
            buckets.upcoming.append(session)
        else:
            buckets.past.append(session)
    return buckets
