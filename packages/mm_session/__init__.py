from .dto import CallConfig, SessionContext, SessionState
from .engine import CallSessionEngine
from .registry import SessionRegistry
from .state import FinishTrigger, SessionMode, SessionStatus

__all__ = [
    "CallConfig",
    "SessionContext",
    "SessionState",
    "CallSessionEngine",
    "SessionRegistry",
    "FinishTrigger",
    "SessionMode",
    "SessionStatus",
]
