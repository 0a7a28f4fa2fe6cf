from .accumulator import TranscriptAccumulator
from .dto import Speaker, Turn

__all__ = ["TranscriptAccumulator", "Speaker", "Turn"]
