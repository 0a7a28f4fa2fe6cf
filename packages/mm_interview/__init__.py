from .models import Interview, InterviewHistoryItem
from .service import InterviewService, parse_questions

__all__ = ["Interview", "InterviewHistoryItem", "InterviewService", "parse_questions"]
