import time
from typing import Dict, List, Optional

from packages.mm_session.engine import CallSessionEngine
from packages.mm_session.registry import SessionRegistry


class MemorySessionRegistry(SessionRegistry):
    """
    In-memory implementation of SessionRegistry.
    Sessions are ephemeral by definition, so this is the only implementation.
    """
    def __init__(self):
        self._sessions: Dict[str, CallSessionEngine] = {}

    def add(self, engine: CallSessionEngine) -> None:
        self._sessions[engine.session_id] = engine

    def get(self, session_id: str) -> Optional[CallSessionEngine]:
        return self._sessions.get(session_id)

    def release(self, session_id: str) -> bool:
        engine = self._sessions.pop(session_id, None)
        if engine is None:
            return False
        engine.close()
        return True

    def purge_finished(self, max_age_sec: float, now: Optional[float] = None) -> List[str]:
        now = time.time() if now is None else now
        expired = [
            session_id for session_id, engine in self._sessions.items()
            if engine.is_settled
            and engine.context.finished_at is not None
            and now - engine.context.finished_at >= max_age_sec
        ]
        for session_id in expired:
            self.release(session_id)
        return expired

    def find_by_user(self, user_id: str) -> List[CallSessionEngine]:
        """O(N) scan; fine for the number of concurrent calls a process holds."""
        return [
            engine for engine in self._sessions.values()
            if engine.config is not None and engine.config.user_id == user_id
        ]

    def __len__(self) -> int:
        return len(self._sessions)
