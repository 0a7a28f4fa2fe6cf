from typing import Iterable

from packages.mm_transcript.dto import Turn


def render_transcript(turns: Iterable[Turn]) -> str:
    """
    One "<speaker>: <text>" line per turn, newline-terminated, in order.
    Nothing is dropped or merged.
    """
    return "".join(f"{turn.render()}\n" for turn in turns)
