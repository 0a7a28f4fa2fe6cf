from abc import ABC, abstractmethod
from typing import List, Optional

from .engine import CallSessionEngine


class SessionRegistry(ABC):
    """
    Interface for the live-session table.
    Each engine is owned by exactly one registry entry; no transcript sharing.
    """
    @abstractmethod
    def add(self, engine: CallSessionEngine) -> None:
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[CallSessionEngine]:
        pass

    @abstractmethod
    def release(self, session_id: str) -> bool:
        """Tear the session down (unsubscribe) and forget it. Returns False if unknown."""
        pass

    @abstractmethod
    def purge_finished(self, max_age_sec: float, now: Optional[float] = None) -> List[str]:
        """Release settled sessions that finished more than max_age_sec ago. Returns their ids."""
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> List[CallSessionEngine]:
        pass
