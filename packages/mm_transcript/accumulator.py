from typing import List, Optional, Tuple

from .dto import Turn


class TranscriptAccumulator:
    """
    Append-only store of finalized speech turns.
    Turns are kept in arrival order; duplicates are recorded as delivered.
    """
    def __init__(self):
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def latest(self) -> Optional[Turn]:
        """Most recently appended turn, or None before the first one."""
        if not self._turns:
            return None
        return self._turns[-1]

    def all(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def snapshot(self) -> Tuple[Turn, ...]:
        """Immutable copy taken at a point in time (used at the terminal transition)."""
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)
