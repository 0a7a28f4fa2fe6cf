from .gate import ScheduleClass, classify, classify_schedule
from .models import ScheduleBuckets, ScheduledSession
from .service import ScheduleService

__all__ = [
    "ScheduleClass",
    "classify",
    "classify_schedule",
    "ScheduleBuckets",
    "ScheduledSession",
    "ScheduleService",
]
